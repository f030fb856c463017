# prodlog/production_data/validators.py
"""
Validation rules for production data entries

Validation Rules:
- BLOCK: Hard stop, the entry cannot be saved
- WARNING: Soft warning, shown next to the form but does not stop saving

Rule IDs:
- R1-R7: Required fields and numeric ranges (BLOCK)
- W1-W2: Plausibility checks (WARNING)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .common import (
    ProductionDataConstants as C, get_language, get_local_today, parse_record_date
)

logger = logging.getLogger(__name__)


class ValidationLevel(Enum):
    """Validation severity levels"""
    BLOCK = "BLOCK"
    WARNING = "WARNING"


@dataclass
class ValidationResult:
    """Single validation result"""
    rule_id: str
    level: ValidationLevel
    message: str
    message_ja: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_blocking(self) -> bool:
        return self.level == ValidationLevel.BLOCK

    def text(self, language: Optional[str] = None) -> str:
        """Message in the requested language"""
        if get_language(language) == 'ja' and self.message_ja:
            return self.message_ja
        return self.message


@dataclass
class ValidationResults:
    """Collection of validation results"""
    results: List[ValidationResult] = field(default_factory=list)

    def add_block(self, rule_id: str, message: str, message_ja: str = "", **details):
        self.results.append(ValidationResult(rule_id, ValidationLevel.BLOCK, message, message_ja, details))

    def add_warning(self, rule_id: str, message: str, message_ja: str = "", **details):
        self.results.append(ValidationResult(rule_id, ValidationLevel.WARNING, message, message_ja, details))

    @property
    def blocks(self) -> List[ValidationResult]:
        return [r for r in self.results if r.is_blocking]

    @property
    def warnings(self) -> List[ValidationResult]:
        return [r for r in self.results if not r.is_blocking]

    @property
    def has_blocks(self) -> bool:
        return bool(self.blocks)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def is_valid(self) -> bool:
        return not self.has_blocks

    def rule_ids(self) -> List[str]:
        return [r.rule_id for r in self.results]

    def __bool__(self) -> bool:
        return self.is_valid

    def __len__(self) -> int:
        return len(self.results)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_number(results: ValidationResults, record: Mapping[str, Any], field_name: str,
                  rule_id: str, label_en: str, label_ja: str, required: bool = False) -> Optional[float]:
    """Validate a non-negative numeric field; returns the number when usable"""
    value = record.get(field_name)

    if _is_blank(value):
        if required:
            results.add_block(rule_id, f"{label_en} is required", f"{label_ja}を入力してください", field=field_name)
        return None

    if isinstance(value, bool):
        number = None
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = None

    if number is None or number != number:  # NaN
        results.add_block(rule_id, f"{label_en} must be a number", f"{label_ja}は数値で入力してください",
                          field=field_name, value=value)
        return None

    if number < 0:
        results.add_block(rule_id, f"{label_en} cannot be negative", f"{label_ja}は0以上で入力してください",
                          field=field_name, value=value)
        return None

    return number


def validate_record(record: Mapping[str, Any]) -> ValidationResults:
    """
    Validate a production data entry before it is saved

    Args:
        record: Entry as submitted by the form

    Returns:
        ValidationResults; falsy when any BLOCK rule fired
    """
    results = ValidationResults()

    if not isinstance(record, Mapping):
        results.add_block("R0", "Entry is not a record", "入力データが不正です")
        return results

    # R1-R3: references
    references = [
        ("R1", C.FIELD_PRODUCT, "Product", "製品"),
        ("R2", C.FIELD_PROCESS, "Process", "工程"),
        ("R3", C.FIELD_WORKER, "Worker", "作業者"),
    ]
    for rule_id, field_name, label_en, label_ja in references:
        if _is_blank(record.get(field_name)):
            results.add_block(rule_id, f"{label_en} is required", f"{label_ja}を選択してください", field=field_name)

    # R4: date
    entry_date = None
    if _is_blank(record.get(C.FIELD_DATE)):
        results.add_block("R4", "Date is required", "日付を入力してください", field=C.FIELD_DATE)
    else:
        try:
            entry_date = parse_record_date(record.get(C.FIELD_DATE))
        except ValueError:
            results.add_block("R4", "Date is not a valid date", "日付の形式が正しくありません",
                              field=C.FIELD_DATE, value=record.get(C.FIELD_DATE))

    # R5-R7: quantities
    quantity = _check_number(results, record, C.FIELD_QUANTITY, "R5", "Quantity", "生産数", required=True)
    defects = _check_number(results, record, C.FIELD_DEFECTS, "R6", "Defect quantity", "不良数")
    _check_number(results, record, C.FIELD_WORK_MINUTES, "R7", "Work time", "作業時間")

    # W1: more defects than produced
    if quantity is not None and defects is not None and defects > quantity:
        results.add_warning("W1", "Defect quantity exceeds produced quantity",
                            "不良数が生産数を超えています", quantity=quantity, defects=defects)

    # W2: future date
    if entry_date is not None and entry_date.date() > get_local_today():
        results.add_warning("W2", "Date is in the future", "日付が未来になっています",
                            date=entry_date.date().isoformat())

    if results.has_blocks:
        logger.info(f"Entry rejected by validation: {', '.join(r.rule_id for r in results.blocks)}")

    return results
