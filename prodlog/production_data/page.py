# prodlog/production_data/page.py
"""
Main UI orchestrator for the production data entry page
Renders header, entry form, filter bar, data table and row actions
"""

import logging
from typing import Callable, Optional

import streamlit as st

from .common import ProductionDataConstants as C, get_message, records_to_dataframe, show_message
from .controller import DataEntryController
from .dashboard import render_dashboard, render_quantity_chart
from .dialogs import show_delete_dialog, show_detail_dialog
from .export import export_filename
from .forms import render_entry_form

logger = logging.getLogger(__name__)

CONTROLLER_KEY = 'data_entry_controller'
EXPORT_EXTENSIONS = ('csv', 'xlsx', 'pdf')


# ==================== Session State ====================

def get_controller() -> DataEntryController:
    """Controller kept in session state; created and loaded on first render"""
    if CONTROLLER_KEY not in st.session_state:
        controller = DataEntryController()
        controller.initialize()
        st.session_state[CONTROLLER_KEY] = controller
        logger.info(f"Data entry page initialized with {len(controller.production_data)} entries")
    return st.session_state[CONTROLLER_KEY]


def _iso_or_blank(value) -> str:
    return value.isoformat() if value else ''


# ==================== Header ====================

def _render_header(controller: DataEntryController):
    lang = controller.language
    col1, col2 = st.columns([4, 1])

    with col1:
        st.title("🏭 " + get_message('page_title', lang))
        st.caption(get_message('page_subtitle', lang))

    with col2:
        if st.button("🔄 Refresh", use_container_width=True):
            controller.initialize()
            _clear_exports()
            st.rerun()


def _render_errors(controller: DataEntryController):
    for message in (controller.submit_error, controller.delete_error, controller.export_error):
        if message:
            show_message(f"❌ {message}", "error")


# ==================== Filter Bar ====================

def _on_search_change():
    controller = st.session_state[CONTROLLER_KEY]
    _clear_exports()
    controller.handle_search(st.session_state.get('pd_filter_search', ''))


def _on_date_change():
    controller = st.session_state[CONTROLLER_KEY]
    _clear_exports()
    controller.handle_date_range_change(
        _iso_or_blank(st.session_state.get('pd_filter_from')),
        _iso_or_blank(st.session_state.get('pd_filter_to'))
    )


def _render_filter_bar(controller: DataEntryController):
    lang = controller.language
    col1, col2, col3 = st.columns([2, 1, 1])

    with col1:
        st.text_input(
            "🔍 " + ("製品で検索" if lang == 'ja' else "Search by product"),
            key="pd_filter_search",
            on_change=_on_search_change
        )
    with col2:
        st.date_input("From", value=None, key="pd_filter_from", on_change=_on_date_change)
    with col3:
        st.date_input("To", value=None, key="pd_filter_to", on_change=_on_date_change)

    col1, col2, col3 = st.columns(3)

    with col1:
        _render_export_button('csv', "📥 CSV", "text/csv", controller.handle_export_csv)
    with col2:
        _render_export_button('xlsx', "📊 Excel",
                              "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                              controller.handle_export_excel)
    with col3:
        _render_export_button('pdf', "📄 PDF", "application/pdf", controller.handle_export_pdf)


def _clear_exports():
    for extension in EXPORT_EXTENSIONS:
        st.session_state.pop(f'pd_{extension}_bytes', None)


def _render_export_button(extension: str, label: str, mime: str,
                          export: Callable[[], Optional[bytes]]):
    """Build the file on click, then offer it for download once"""
    state_key = f'pd_{extension}_bytes'
    data: Optional[bytes] = st.session_state.get(state_key)

    if data:
        st.download_button("⬇️ " + label, data, export_filename(extension), mime,
                           use_container_width=True, key=f"pd_download_{extension}",
                           on_click=lambda: st.session_state.pop(state_key, None))
    elif st.button(label, use_container_width=True, key=f"pd_export_{extension}"):
        data = export()
        if data is not None:
            st.session_state[state_key] = data
        st.rerun()


# ==================== Data Table ====================

def _render_table(controller: DataEntryController):
    lang = controller.language
    records = controller.filtered_data

    if not records:
        st.info("📭 " + get_message('no_data', lang))
        return

    display_df = records_to_dataframe(records, controller.master, lang)

    event = st.dataframe(
        display_df,
        use_container_width=True,
        hide_index=True,
        on_select="rerun",
        selection_mode="single-row",
        key="pd_table"
    )

    selected_rows = event.selection.rows if event is not None else []
    if not selected_rows or selected_rows[0] >= len(records):
        st.caption("👆 " + ("行を選択すると操作できます" if lang == 'ja' else "Select a row for actions"))
        return

    record = records[selected_rows[0]]
    col1, col2, col3 = st.columns(3)

    with col1:
        if st.button("👁️ " + ("詳細" if lang == 'ja' else "Details"), use_container_width=True):
            controller.handle_view_details(record)
            show_detail_dialog(controller)

    with col2:
        if st.button("✏️ " + ("編集" if lang == 'ja' else "Edit"), use_container_width=True):
            controller.handle_edit(record)
            st.rerun()

    with col3:
        if st.button("🗑️ " + ("削除" if lang == 'ja' else "Delete"), use_container_width=True):
            show_delete_dialog(controller, record.get(C.FIELD_ID))


# ==================== Main Page ====================

def render_data_entry_page():
    """Render the full data entry page"""
    controller = get_controller()

    # A full rerun means any open detail dialog was dismissed
    if controller.is_modal_open:
        controller.handle_close_modal()

    _render_header(controller)
    _render_errors(controller)

    render_entry_form(controller)

    st.markdown("---")
    st.subheader(get_message('list_title', controller.language))

    _render_filter_bar(controller)
    render_dashboard(controller)
    _render_table(controller)

    with st.expander("📈 " + ("製品別生産数" if controller.language == 'ja' else "Quantity by Product")):
        render_quantity_chart(controller)
