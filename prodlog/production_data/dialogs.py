# prodlog/production_data/dialogs.py
"""
Dialog components for production data
Detail view and delete confirmation
"""

import logging

import streamlit as st

from .common import (
    ProductionDataConstants as C, format_date, format_number, get_field_label,
    get_message, lookup_name
)
from .controller import DataEntryController

logger = logging.getLogger(__name__)


# ==================== Detail Dialog ====================

@st.dialog("📋 Details", width="large")
def show_detail_dialog(controller: DataEntryController):
    """Show the record currently held in controller.viewing_data"""
    record = controller.viewing_data
    lang = controller.language

    if not record:
        st.error("❌ " + get_message('no_data', lang))
        return

    col1, col2 = st.columns(2)

    with col1:
        st.markdown("**📦 " + ("作業内容" if lang == 'ja' else "Work") + "**")
        st.write(f"• **{get_field_label(C.FIELD_DATE, lang)}:** {format_date(record.get(C.FIELD_DATE))}")
        st.write(f"• **{get_field_label(C.FIELD_PRODUCT, lang)}:** "
                 f"{lookup_name(controller.products, record.get(C.FIELD_PRODUCT))}")
        st.write(f"• **{get_field_label(C.FIELD_PROCESS, lang)}:** "
                 f"{lookup_name(controller.processes, record.get(C.FIELD_PROCESS))}")
        st.write(f"• **{get_field_label(C.FIELD_WORKER, lang)}:** "
                 f"{lookup_name(controller.workers, record.get(C.FIELD_WORKER))}")

    with col2:
        st.markdown("**📊 " + ("数量" if lang == 'ja' else "Quantity") + "**")
        for field_name in C.NUMERIC_FIELDS:
            value = record.get(field_name)
            shown = format_number(value, C.QUANTITY_DECIMALS) if value not in (None, '') else '-'
            st.write(f"• **{get_field_label(field_name, lang)}:** {shown}")

    if record.get(C.FIELD_NOTES):
        st.markdown("---")
        st.markdown(f"**{get_field_label(C.FIELD_NOTES, lang)}**")
        st.write(record[C.FIELD_NOTES])

    st.markdown("---")
    st.caption(
        f"ID: {record.get(C.FIELD_ID, '')} | "
        f"{get_field_label(C.FIELD_CREATED_AT, lang)}: {format_date(record.get(C.FIELD_CREATED_AT), '%Y/%m/%d %H:%M')} | "
        f"{get_field_label(C.FIELD_UPDATED_AT, lang)}: {format_date(record.get(C.FIELD_UPDATED_AT), '%Y/%m/%d %H:%M') or '-'}"
    )

    if st.button("✖️ Close", use_container_width=True, key="detail_dialog_close"):
        controller.handle_close_modal()
        st.rerun()


# ==================== Delete Dialog ====================

@st.dialog("🗑️ Delete", width="small")
def show_delete_dialog(controller: DataEntryController, record_id: str):
    """Ask for confirmation, then delete through the controller"""
    lang = controller.language
    st.warning(get_message('delete_confirm', lang))

    col1, col2 = st.columns(2)

    with col1:
        if st.button("🗑️ " + ("削除" if lang == 'ja' else "Delete"), type="primary",
                     use_container_width=True, key="delete_dialog_confirm"):
            if controller.handle_delete(record_id):
                logger.info(f"Deleted production data {record_id} from dialog")
            st.rerun()

    with col2:
        if st.button("✖️ " + ("キャンセル" if lang == 'ja' else "Cancel"),
                     use_container_width=True, key="delete_dialog_cancel"):
            st.rerun()
