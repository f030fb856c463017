# prodlog/production_data/storage.py
"""
Persistence for production data records

The whole collection is one JSON array in one storage slot. Every mutation
reads the full collection, changes a copy and writes the full collection
back. A malformed slot reads as an empty list, and the next write
starts over from it after copying the unreadable payload to a backup slot.
Nothing here raises to the caller: failures are logged and returned
as StorageResult failures, or as an empty list for read-only queries.

There is no version check between read and write, so two writers on the
same slot race and the last write wins.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from prodlog.config import STORAGE_KEYS
from prodlog.kv_store import KeyValueStore, create_store
from .common import DateLike, ProductionDataConstants, end_of_day, parse_record_date
from .results import StorageErrorKind, StorageResult

logger = logging.getLogger(__name__)


class ProductionDataStorage:
    """Read-modify-write access to the production data slot"""

    def __init__(self, store: Optional[KeyValueStore] = None,
                 key: str = STORAGE_KEYS["production_data"]):
        self.store = store if store is not None else create_store()
        self.key = key
        self.backup_key = f"{key}.corrupt"

    # ==================== Read / Write ====================

    def load(self) -> StorageResult:
        """
        Read and decode the collection

        Returns:
            StorageResult with the records, or a failure:
            STORAGE_UNAVAILABLE if the store raised,
            MALFORMED_DATA if the slot is not a JSON list
        """
        try:
            raw = self.store.get(self.key)
        except Exception as e:
            logger.error(f"❌ Error reading production data: {e}", exc_info=True)
            return StorageResult.failure(StorageErrorKind.STORAGE_UNAVAILABLE, str(e))

        if raw is None or raw == "":
            return StorageResult.success([])

        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.error(f"❌ Error reading production data: {e}")
            return StorageResult.failure(StorageErrorKind.MALFORMED_DATA, str(e))

        if not isinstance(data, list):
            message = f"Expected a JSON array, got {type(data).__name__}"
            logger.error(f"❌ Error reading production data: {message}")
            return StorageResult.failure(StorageErrorKind.MALFORMED_DATA, message)

        return StorageResult.success(data)

    def _load_for_write(self) -> StorageResult:
        """
        Records to modify; a malformed slot starts over as an empty list

        The unreadable payload is copied to the backup slot first so the
        write that follows does not lose it.
        """
        current = self.load()
        if not current.is_malformed:
            return current

        try:
            raw = self.store.get(self.key)
            if raw is not None:
                self.store.set(self.backup_key, raw)
                logger.warning(f"⚠️ Malformed production data copied to {self.backup_key}")
        except Exception as e:
            logger.error(f"❌ Error backing up malformed production data: {e}", exc_info=True)

        return StorageResult.success([])

    def get_all(self) -> List[Dict[str, Any]]:
        """All records in insertion order; empty list when the slot is absent or unreadable"""
        result = self.load()
        return result.records if result else []

    def save_all(self, records: List[Dict[str, Any]]) -> StorageResult:
        """Serialize and overwrite the slot"""
        try:
            payload = json.dumps(list(records), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"❌ Error saving production data: {e}")
            return StorageResult.failure(StorageErrorKind.INVALID_RECORD, str(e))

        try:
            self.store.set(self.key, payload)
        except Exception as e:
            logger.error(f"❌ Error saving production data: {e}", exc_info=True)
            return StorageResult.failure(StorageErrorKind.STORAGE_UNAVAILABLE, str(e))

        return StorageResult.success(records, affected=len(records))

    # ==================== Mutations ====================

    def add(self, record: Mapping[str, Any]) -> StorageResult:
        """
        Append a record to the end of the collection

        Duplicate ids are not checked.
        """
        if not isinstance(record, Mapping):
            logger.error(f"❌ Error adding production data: not a record ({type(record).__name__})")
            return StorageResult.failure(StorageErrorKind.INVALID_RECORD, "Record must be a mapping")

        current = self._load_for_write()
        if not current:
            logger.error(f"❌ Error adding production data: {current.message}")
            return current

        records = current.records
        records.append(dict(record))

        result = self.save_all(records)
        if result:
            logger.info(f"✅ Added production data {record.get('id')}")
            return StorageResult.success(records, affected=1)
        return result

    def update(self, record: Mapping[str, Any]) -> StorageResult:
        """
        Replace the first record with the same id, keeping its position

        Returns NOT_FOUND without writing when no record has that id.
        """
        if not isinstance(record, Mapping):
            logger.error(f"❌ Error updating production data: not a record ({type(record).__name__})")
            return StorageResult.failure(StorageErrorKind.INVALID_RECORD, "Record must be a mapping")

        current = self._load_for_write()
        if not current:
            logger.error(f"❌ Error updating production data: {current.message}")
            return current

        records = current.records
        record_id = record.get(ProductionDataConstants.FIELD_ID)
        index = next(
            (i for i, item in enumerate(records)
             if isinstance(item, dict) and item.get(ProductionDataConstants.FIELD_ID) == record_id),
            -1
        )

        if index == -1:
            logger.warning(f"⚠️ Production data {record_id} not found for update")
            return StorageResult.failure(StorageErrorKind.NOT_FOUND, f"Record {record_id} not found")

        records[index] = dict(record)

        result = self.save_all(records)
        if result:
            logger.info(f"✅ Updated production data {record_id}")
            return StorageResult.success(records, affected=1)
        return result

    def delete(self, record_id: str) -> StorageResult:
        """
        Remove every record with the given id

        The collection is written back even when nothing matched, and that
        still counts as success (affected == 0).
        """
        current = self._load_for_write()
        if not current:
            logger.error(f"❌ Error deleting production data: {current.message}")
            return current

        remaining = [
            item for item in current.records
            if not (isinstance(item, dict) and item.get(ProductionDataConstants.FIELD_ID) == record_id)
        ]
        removed = len(current.records) - len(remaining)

        result = self.save_all(remaining)
        if result:
            logger.info(f"✅ Deleted production data {record_id} ({removed} removed)")
            return StorageResult.success(remaining, affected=removed)
        return result

    # ==================== Filters ====================

    def filter_by_date_range(self, start_date: DateLike = None,
                             end_date: DateLike = None) -> List[Dict[str, Any]]:
        """
        Records whose date falls in [start, end-of-day(end)]

        Either bound may be omitted (None or blank). With both omitted the
        full collection is returned in order. Records with an unparsable
        date never match a bound.
        """
        try:
            start = parse_record_date(start_date)
            end = parse_record_date(end_date)
            if end is not None:
                end = end_of_day(end)

            data = self.get_all()
            if start is None and end is None:
                return data

            filtered = []
            for item in data:
                item_date = _safe_record_date(item)
                if item_date is None:
                    continue
                if start is not None and item_date < start:
                    continue
                if end is not None and item_date > end:
                    continue
                filtered.append(item)
            return filtered

        except Exception as e:
            logger.error(f"❌ Error filtering by date range: {e}")
            return []

    def filter_by_product_name(self, term: Optional[str]) -> List[Dict[str, Any]]:
        """
        Case-insensitive substring match on the product reference

        A blank or whitespace-only term returns the full collection.
        """
        try:
            data = self.get_all()
            search_term = (term or "").strip().lower()
            if not search_term:
                return data

            return [
                item for item in data
                if search_term in str(item.get(ProductionDataConstants.FIELD_PRODUCT) or "").lower()
            ]

        except Exception as e:
            logger.error(f"❌ Error filtering by product name: {e}")
            return []


def _safe_record_date(item: Any):
    """Parsed record date, or None when missing or unparsable"""
    if not isinstance(item, dict):
        return None
    try:
        return parse_record_date(item.get(ProductionDataConstants.FIELD_DATE))
    except ValueError:
        return None
