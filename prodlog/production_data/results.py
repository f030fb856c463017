# prodlog/production_data/results.py
"""
Result types for storage operations

Every storage operation reports success or one failure kind instead of
raising, so callers can tell "not found" from "storage unavailable" from
"malformed data". A result is truthy exactly when the operation succeeded.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class StorageErrorKind(Enum):
    """Why a storage operation failed"""
    NOT_FOUND = "NOT_FOUND"                        # No record with the requested id
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"    # Backend read/write raised
    MALFORMED_DATA = "MALFORMED_DATA"              # Slot content is not a JSON list
    INVALID_RECORD = "INVALID_RECORD"              # Caller passed something that is not a record


@dataclass
class StorageResult:
    """Outcome of a storage operation"""
    ok: bool
    error: Optional[StorageErrorKind] = None
    message: str = ""
    records: List[Dict[str, Any]] = field(default_factory=list)
    affected: int = 0

    @classmethod
    def success(cls, records: Optional[List[Dict[str, Any]]] = None,
                affected: int = 0, message: str = "") -> "StorageResult":
        return cls(ok=True, records=list(records or []), affected=affected, message=message)

    @classmethod
    def failure(cls, error: StorageErrorKind, message: str = "") -> "StorageResult":
        return cls(ok=False, error=error, message=message or error.value)

    @property
    def is_not_found(self) -> bool:
        return self.error == StorageErrorKind.NOT_FOUND

    @property
    def is_unavailable(self) -> bool:
        return self.error == StorageErrorKind.STORAGE_UNAVAILABLE

    @property
    def is_malformed(self) -> bool:
        return self.error == StorageErrorKind.MALFORMED_DATA

    def __bool__(self) -> bool:
        return self.ok
