# prodlog/production_data/controller.py
"""
Data entry page controller

Holds the page state and turns UI events into storage calls. It has no
Streamlit dependency: page.py keeps one instance in session state and
renders from its attributes.

State:
- production_data: full collection, reloaded after every mutation
- filtered_data: what the table shows (search / date range result)
- editing_data: record being edited (idle when None)
- viewing_data / is_modal_open: detail dialog, independent of editing

Handlers never raise; failures are logged and surfaced as localized
messages in submit_error / delete_error / export_error.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .common import (
    DateLike, ProductionDataConstants as C, calculate_percentage, generate_record_id,
    get_language, get_message, timestamp_now, to_number
)
from .export import export_to_csv, export_to_excel, export_to_pdf
from .master_data import MasterDataRepository
from .storage import ProductionDataStorage
from .validators import ValidationResults, validate_record

logger = logging.getLogger(__name__)


class DataEntryController:
    """State and event handlers for the production data entry page"""

    def __init__(self, storage: Optional[ProductionDataStorage] = None,
                 master_data: Optional[MasterDataRepository] = None,
                 language: Optional[str] = None):
        self.storage = storage if storage is not None else ProductionDataStorage()
        self.master_data = master_data if master_data is not None else MasterDataRepository(self.storage.store)
        self.language = get_language(language)

        self.production_data: List[Dict[str, Any]] = []
        self.filtered_data: List[Dict[str, Any]] = []
        self.editing_data: Optional[Dict[str, Any]] = None
        self.viewing_data: Optional[Dict[str, Any]] = None
        self.is_modal_open = False

        self.products: List[Dict[str, Any]] = []
        self.processes: List[Dict[str, Any]] = []
        self.workers: List[Dict[str, Any]] = []

        self.submit_error: Optional[str] = None
        self.delete_error: Optional[str] = None
        self.export_error: Optional[str] = None
        self.validation: Optional[ValidationResults] = None

    # ==================== Loading ====================

    def initialize(self):
        """Load records and master data (page mount)"""
        self.load_data()
        self.load_master_data()

    def load_data(self):
        """Reload the full collection into both in-memory copies"""
        try:
            data = self.storage.get_all()
            self.production_data = data
            self.filtered_data = list(data)
        except Exception as e:
            logger.error(f"Error loading data: {e}", exc_info=True)

    def load_master_data(self):
        """Load products, processes and workers"""
        try:
            master = self.master_data.load_all()
            self.products = master['products']
            self.processes = master['processes']
            self.workers = master['workers']
        except Exception as e:
            logger.error(f"Error loading master data: {e}", exc_info=True)

    @property
    def master(self) -> Dict[str, List[Dict[str, Any]]]:
        return {'products': self.products, 'processes': self.processes, 'workers': self.workers}

    @property
    def is_editing(self) -> bool:
        return self.editing_data is not None

    # ==================== Submit / Edit ====================

    def _prepare_record(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        record = dict(data)
        now = timestamp_now()

        if self.is_editing:
            record[C.FIELD_ID] = self.editing_data.get(C.FIELD_ID)
            record.setdefault(C.FIELD_CREATED_AT, self.editing_data.get(C.FIELD_CREATED_AT))
            record[C.FIELD_UPDATED_AT] = now
        else:
            if not record.get(C.FIELD_ID):
                record[C.FIELD_ID] = generate_record_id()
            record.setdefault(C.FIELD_CREATED_AT, now)

        return record

    def handle_data_submit(self, data: Mapping[str, Any]) -> bool:
        """
        Save the form entry: update while editing, add otherwise

        Returns:
            True when the entry was saved and the data reloaded
        """
        try:
            self.submit_error = None

            self.validation = validate_record(data)
            if self.validation.has_blocks:
                self.submit_error = self.validation.blocks[0].text(self.language)
                return False

            record = self._prepare_record(data)

            if self.is_editing:
                result = self.storage.update(record)
                if result:
                    self.editing_data = None
            else:
                result = self.storage.add(record)

            if result:
                self.load_data()
                return True

            logger.warning(f"Submit failed: {result.error.value if result.error else ''} {result.message}")
            self.submit_error = get_message('save_error', self.language)
            return False

        except Exception as e:
            logger.error(f"Error submitting data: {e}", exc_info=True)
            self.submit_error = get_message('save_error', self.language)
            return False

    def handle_edit(self, record: Mapping[str, Any]):
        """Enter editing state for a record (form gets pre-filled)"""
        self.editing_data = dict(record)
        self.submit_error = None
        self.validation = None

    def cancel_edit(self):
        """Leave editing state without saving"""
        self.editing_data = None
        self.submit_error = None
        self.validation = None

    # ==================== Delete ====================

    def handle_delete(self, record_id: str,
                      confirm: Optional[Callable[[], bool]] = None) -> Optional[bool]:
        """
        Delete a record after confirmation

        Args:
            record_id: Record to delete
            confirm: Callable asked before deleting; None means already confirmed

        Returns:
            None if not confirmed, else whether the delete succeeded
        """
        try:
            if confirm is not None and not confirm():
                return None

            self.delete_error = None
            result = self.storage.delete(record_id)

            if result:
                if self.is_editing and self.editing_data.get(C.FIELD_ID) == record_id:
                    self.editing_data = None
                if self.viewing_data and self.viewing_data.get(C.FIELD_ID) == record_id:
                    self.handle_close_modal()
                self.load_data()
                return True

            logger.warning(f"Delete failed: {result.error.value if result.error else ''} {result.message}")
            self.delete_error = get_message('delete_error', self.language)
            return False

        except Exception as e:
            logger.error(f"Error deleting data: {e}", exc_info=True)
            self.delete_error = get_message('delete_error', self.language)
            return False

    # ==================== Detail Modal ====================

    def handle_view_details(self, record: Mapping[str, Any]):
        self.viewing_data = dict(record)
        self.is_modal_open = True

    def handle_close_modal(self):
        self.is_modal_open = False
        self.viewing_data = None

    # ==================== Filters ====================

    def handle_search(self, term: Optional[str]):
        """Filter by product; a blank term shows the full in-memory data"""
        try:
            if not (term or '').strip():
                self.filtered_data = list(self.production_data)
                return

            self.filtered_data = self.storage.filter_by_product_name(term)
        except Exception as e:
            logger.error(f"Error searching data: {e}", exc_info=True)

    def handle_date_range_change(self, start_date: DateLike, end_date: DateLike):
        """Filter by date range; both bounds blank shows the full in-memory data"""
        try:
            if not start_date and not end_date:
                self.filtered_data = list(self.production_data)
                return

            self.filtered_data = self.storage.filter_by_date_range(start_date, end_date)
        except Exception as e:
            logger.error(f"Error filtering by date: {e}", exc_info=True)

    # ==================== Export ====================

    def _export(self, exporter: Callable, error_key: str, kind: str) -> Optional[bytes]:
        self.export_error = None
        try:
            return exporter(self.filtered_data, self.master, self.language)
        except Exception as e:
            logger.error(f"Error exporting {kind}: {e}", exc_info=True)
            self.export_error = get_message(error_key, self.language)
            return None

    def handle_export_csv(self) -> Optional[bytes]:
        return self._export(export_to_csv, 'csv_export_error', 'CSV')

    def handle_export_excel(self) -> Optional[bytes]:
        return self._export(export_to_excel, 'excel_export_error', 'Excel')

    def handle_export_pdf(self) -> Optional[bytes]:
        return self._export(export_to_pdf, 'pdf_export_error', 'PDF')

    # ==================== Summary ====================

    def get_summary(self) -> Dict[str, Any]:
        """Totals over the filtered data"""
        total_quantity = sum(to_number(r.get(C.FIELD_QUANTITY)) for r in self.filtered_data)
        total_defects = sum(to_number(r.get(C.FIELD_DEFECTS)) for r in self.filtered_data)

        return {
            'record_count': len(self.filtered_data),
            'total_quantity': total_quantity,
            'total_defects': total_defects,
            'defect_rate': calculate_percentage(total_defects, total_quantity),
        }
