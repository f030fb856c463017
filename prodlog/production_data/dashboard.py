# prodlog/production_data/dashboard.py
"""
Summary metrics and quantity chart for the filtered production data
"""

import logging

import pandas as pd
import plotly.express as px
import streamlit as st

from .common import ProductionDataConstants as C, format_number, get_field_label, lookup_name, to_number
from .controller import DataEntryController

logger = logging.getLogger(__name__)


def render_dashboard(controller: DataEntryController):
    """Render metrics over controller.filtered_data"""
    lang = controller.language
    summary = controller.get_summary()

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("📋 " + ("件数" if lang == 'ja' else "Entries"), format_number(summary['record_count'], 0))
    with col2:
        st.metric("📦 " + get_field_label(C.FIELD_QUANTITY, lang), format_number(summary['total_quantity'], 0))
    with col3:
        st.metric("⚠️ " + get_field_label(C.FIELD_DEFECTS, lang), format_number(summary['total_defects'], 0))
    with col4:
        st.metric("📉 " + ("不良率" if lang == 'ja' else "Defect Rate"), f"{summary['defect_rate']:.1f}%")


def render_quantity_chart(controller: DataEntryController):
    """Bar chart of produced quantity per product"""
    if not controller.filtered_data:
        return

    lang = controller.language
    product_label = get_field_label(C.FIELD_PRODUCT, lang)
    quantity_label = get_field_label(C.FIELD_QUANTITY, lang)

    df = pd.DataFrame([
        {
            product_label: lookup_name(controller.products, r.get(C.FIELD_PRODUCT)),
            quantity_label: to_number(r.get(C.FIELD_QUANTITY)),
        }
        for r in controller.filtered_data
    ])
    grouped = df.groupby(product_label, as_index=False)[quantity_label].sum()

    fig = px.bar(grouped, x=product_label, y=quantity_label,
                 color=quantity_label, color_continuous_scale='Viridis')
    fig.update_layout(showlegend=False, xaxis_tickangle=-45)
    st.plotly_chart(fig, use_container_width=True)
