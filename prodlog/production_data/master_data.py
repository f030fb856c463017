# prodlog/production_data/master_data.py
"""
Reference master data: products, processes, workers

Each list lives in its own storage slot as a JSON array of
{"id": ..., "name": ...} objects. This module only reads them.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from prodlog.config import STORAGE_KEYS
from prodlog.kv_store import KeyValueStore, create_store

logger = logging.getLogger(__name__)

MASTER_KINDS = ('products', 'processes', 'workers')


class MasterDataRepository:
    """Read-only access to master data slots"""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else create_store()

    def _load(self, kind: str) -> List[Dict[str, Any]]:
        """Load one master list; an absent or unreadable slot gives an empty list"""
        key = STORAGE_KEYS[kind]
        try:
            raw = self.store.get(key)
            if not raw:
                return []

            data = json.loads(raw)
            if not isinstance(data, list):
                logger.error(f"❌ Master data '{key}' is not a list")
                return []

            return [item for item in data if isinstance(item, dict)]

        except Exception as e:
            logger.error(f"❌ Error loading master data '{key}': {e}")
            return []

    def get_products(self) -> List[Dict[str, Any]]:
        return self._load('products')

    def get_processes(self) -> List[Dict[str, Any]]:
        return self._load('processes')

    def get_workers(self) -> List[Dict[str, Any]]:
        return self._load('workers')

    def load_all(self) -> Dict[str, List[Dict[str, Any]]]:
        """All master lists keyed by kind"""
        return {kind: self._load(kind) for kind in MASTER_KINDS}

    @staticmethod
    def build_options(items: List[Dict[str, Any]]) -> Dict[str, str]:
        """
        Select box options for a master list

        Returns:
            Dictionary of display label -> id, in list order. Labels are
            "name (id)" when the name differs from the id.
        """
        options = {}
        for item in items:
            item_id = item.get('id')
            if item_id is None or item_id == '':
                continue
            name = item.get('name') or item_id
            label = str(name) if str(name) == str(item_id) else f"{name} ({item_id})"
            options[label] = str(item_id)
        return options
