# prodlog/production_data/forms.py
"""
Entry form for production data
Create new entries, or edit the entry selected in the table
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import streamlit as st

from .common import (
    ProductionDataConstants as C, get_field_label, get_local_today, parse_record_date, to_number
)
from .controller import DataEntryController
from .master_data import MasterDataRepository

logger = logging.getLogger(__name__)


def _reference_input(label: str, items: List[Dict[str, Any]], current: Optional[str], key: str) -> str:
    """Select box over master data, or a text input when the list is empty"""
    options = MasterDataRepository.build_options(items)

    if not options:
        return st.text_input(label, value=current or '', key=key)

    labels = list(options.keys())
    ids = list(options.values())
    index = ids.index(str(current)) if current is not None and str(current) in ids else None

    selected = st.selectbox(label, options=labels, index=index, key=key, placeholder="-")
    return options[selected] if selected else ''


def _initial_date(record: Optional[Dict[str, Any]]) -> date:
    if record:
        try:
            parsed = parse_record_date(record.get(C.FIELD_DATE))
            if parsed:
                return parsed.date()
        except ValueError:
            pass
    return get_local_today()


def _initial_number(record: Dict[str, Any], field_name: str) -> float:
    """Stored value for a number input; junk and negatives start at 0"""
    value = to_number(record.get(field_name))
    return value if value > 0 else 0.0


def render_entry_form(controller: DataEntryController):
    """
    Render the entry form and submit it through the controller

    The widget keys include the edited record id so switching records
    re-initializes the form values.
    """
    editing = controller.editing_data
    lang = controller.language
    form_key = f"entry_form_{editing.get(C.FIELD_ID) if editing else 'new'}"
    initial = editing or {}

    if editing:
        st.subheader("✏️ " + ("データ編集" if lang == 'ja' else "Edit Entry"))
    else:
        st.subheader("➕ " + ("新規データ入力" if lang == 'ja' else "New Entry"))

    with st.form(form_key, clear_on_submit=not editing):
        col1, col2, col3, col4 = st.columns(4)

        with col1:
            product_id = _reference_input(get_field_label(C.FIELD_PRODUCT, lang), controller.products,
                                          initial.get(C.FIELD_PRODUCT), f"{form_key}_product")
        with col2:
            process_id = _reference_input(get_field_label(C.FIELD_PROCESS, lang), controller.processes,
                                          initial.get(C.FIELD_PROCESS), f"{form_key}_process")
        with col3:
            worker_id = _reference_input(get_field_label(C.FIELD_WORKER, lang), controller.workers,
                                         initial.get(C.FIELD_WORKER), f"{form_key}_worker")
        with col4:
            entry_date = st.date_input(get_field_label(C.FIELD_DATE, lang), value=_initial_date(editing),
                                       key=f"{form_key}_date")

        col1, col2, col3 = st.columns(3)
        with col1:
            quantity = st.number_input(get_field_label(C.FIELD_QUANTITY, lang), min_value=0.0, step=1.0,
                                       value=_initial_number(initial, C.FIELD_QUANTITY),
                                       key=f"{form_key}_quantity")
        with col2:
            defects = st.number_input(get_field_label(C.FIELD_DEFECTS, lang), min_value=0.0, step=1.0,
                                      value=_initial_number(initial, C.FIELD_DEFECTS),
                                      key=f"{form_key}_defects")
        with col3:
            work_minutes = st.number_input(get_field_label(C.FIELD_WORK_MINUTES, lang), min_value=0.0, step=5.0,
                                           value=_initial_number(initial, C.FIELD_WORK_MINUTES),
                                           key=f"{form_key}_minutes")

        notes = st.text_area(get_field_label(C.FIELD_NOTES, lang), value=initial.get(C.FIELD_NOTES) or '',
                             key=f"{form_key}_notes")

        col_btn1, col_btn2 = st.columns(2)
        with col_btn1:
            submitted = st.form_submit_button(
                "💾 " + (("更新" if editing else "登録") if lang == 'ja' else ("Update" if editing else "Save")),
                type="primary", use_container_width=True
            )
        with col_btn2:
            cancelled = st.form_submit_button(
                "✖️ " + ("キャンセル" if lang == 'ja' else "Cancel"),
                use_container_width=True, disabled=not editing
            )

    if cancelled:
        controller.cancel_edit()
        st.rerun()

    if submitted:
        entry = {
            C.FIELD_PRODUCT: product_id,
            C.FIELD_PROCESS: process_id,
            C.FIELD_WORKER: worker_id,
            C.FIELD_DATE: entry_date.isoformat() if entry_date else '',
            C.FIELD_QUANTITY: quantity,
            C.FIELD_DEFECTS: defects,
            C.FIELD_WORK_MINUTES: work_minutes,
            C.FIELD_NOTES: notes,
        }
        if controller.handle_data_submit(entry):
            logger.info("Entry saved from form")
            st.rerun()

    # Warnings from the last validation, shown under the form
    if controller.validation and controller.validation.has_warnings:
        for warning in controller.validation.warnings:
            st.warning(f"⚠️ {warning.text(lang)}")
