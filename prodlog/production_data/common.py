# prodlog/production_data/common.py
"""
Common utilities for the Production Data domain
Constants, localized messages, date parsing and formatting helpers
"""

import logging
import uuid
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd
import streamlit as st

from prodlog.config import APP_CONFIG

logger = logging.getLogger(__name__)

try:
    LOCAL_TIMEZONE = ZoneInfo(APP_CONFIG["TIMEZONE"])
except ZoneInfoNotFoundError:
    LOCAL_TIMEZONE = None
    logger.warning(f"Unknown timezone {APP_CONFIG['TIMEZONE']!r}. Using system timezone.")


# ==================== Constants ====================

class ProductionDataConstants:
    """Production data record constants"""
    QUANTITY_DECIMALS = 2

    # Record fields, in display order
    FIELD_ID = 'id'
    FIELD_PRODUCT = 'product_id'
    FIELD_PROCESS = 'process_id'
    FIELD_WORKER = 'worker_id'
    FIELD_DATE = 'date'
    FIELD_QUANTITY = 'quantity'
    FIELD_DEFECTS = 'defect_quantity'
    FIELD_WORK_MINUTES = 'work_minutes'
    FIELD_NOTES = 'notes'
    FIELD_CREATED_AT = 'created_at'
    FIELD_UPDATED_AT = 'updated_at'

    EXPORT_FIELDS = [
        FIELD_DATE, FIELD_PRODUCT, FIELD_PROCESS, FIELD_WORKER,
        FIELD_QUANTITY, FIELD_DEFECTS, FIELD_WORK_MINUTES, FIELD_NOTES,
    ]

    NUMERIC_FIELDS = [FIELD_QUANTITY, FIELD_DEFECTS, FIELD_WORK_MINUTES]

    DATE_FORMAT = '%Y-%m-%d'
    DATETIME_FORMAT = '%Y-%m-%dT%H:%M:%S'


# ==================== Localized Messages ====================

MESSAGES = {
    'ja': {
        'save_error': 'データの保存中にエラーが発生しました。',
        'delete_error': 'データの削除中にエラーが発生しました。',
        'delete_confirm': 'このデータを削除してもよろしいですか？',
        'csv_export_error': 'CSVエクスポート中にエラーが発生しました。',
        'excel_export_error': 'Excelエクスポート中にエラーが発生しました。',
        'pdf_export_error': 'PDFエクスポート中にエラーが発生しました。',
        'page_title': '生産データ管理',
        'page_subtitle': '新規データの入力と既存データの閲覧・編集',
        'list_title': '登録済みデータ一覧',
        'pdf_title': '生産データ一覧',
        'no_data': 'データがありません',
        'total': '合計',
        'generated_at': '出力日時',
    },
    'en': {
        'save_error': 'An error occurred while saving the data.',
        'delete_error': 'An error occurred while deleting the data.',
        'delete_confirm': 'Are you sure you want to delete this entry?',
        'csv_export_error': 'An error occurred while exporting CSV.',
        'excel_export_error': 'An error occurred while exporting Excel.',
        'pdf_export_error': 'An error occurred while exporting PDF.',
        'page_title': 'Production Data',
        'page_subtitle': 'Enter new entries and review or edit existing ones',
        'list_title': 'Registered Entries',
        'pdf_title': 'Production Data List',
        'no_data': 'No data',
        'total': 'Total',
        'generated_at': 'Generated at',
    },
}

FIELD_LABELS = {
    'ja': {
        'id': 'ID',
        'product_id': '製品',
        'process_id': '工程',
        'worker_id': '作業者',
        'date': '日付',
        'quantity': '生産数',
        'defect_quantity': '不良数',
        'work_minutes': '作業時間(分)',
        'notes': '備考',
        'created_at': '登録日時',
        'updated_at': '更新日時',
    },
    'en': {
        'id': 'ID',
        'product_id': 'Product',
        'process_id': 'Process',
        'worker_id': 'Worker',
        'date': 'Date',
        'quantity': 'Quantity',
        'defect_quantity': 'Defects',
        'work_minutes': 'Work Time (min)',
        'notes': 'Notes',
        'created_at': 'Created',
        'updated_at': 'Updated',
    },
}


def get_language(language: Optional[str] = None) -> str:
    """Resolve a supported language code, falling back to Japanese"""
    language = (language or APP_CONFIG['LANGUAGE']).lower()
    return language if language in MESSAGES else 'ja'


def get_message(key: str, language: Optional[str] = None) -> str:
    """Get a localized message"""
    return MESSAGES[get_language(language)].get(key, key)


def get_field_label(field_name: str, language: Optional[str] = None) -> str:
    """Get a localized column label"""
    return FIELD_LABELS[get_language(language)].get(field_name, field_name)


# ==================== Timezone Helpers ====================

def get_local_now() -> datetime:
    """Get current datetime in the configured timezone"""
    if LOCAL_TIMEZONE:
        return datetime.now(LOCAL_TIMEZONE)
    return datetime.now()


def get_local_today() -> date:
    """Get current date in the configured timezone"""
    return get_local_now().date()


def timestamp_now() -> str:
    """Current local time as an ISO string without offset"""
    return get_local_now().strftime(ProductionDataConstants.DATETIME_FORMAT)


# ==================== Date Parsing ====================

DateLike = Union[str, date, datetime, None]


def parse_record_date(value: DateLike) -> Optional[datetime]:
    """
    Parse a record or bound date into a naive datetime

    Accepts 'YYYY-MM-DD', 'YYYY-MM-DDTHH:MM[:SS]' (space separator too),
    date and datetime objects. Aware datetimes are converted to the local
    timezone and made naive so they compare with date-only values.

    Returns:
        datetime, or None for None/blank input

    Raises:
        ValueError: If the value cannot be parsed
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported date value: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(LOCAL_TIMEZONE).replace(tzinfo=None)

    return parsed


def end_of_day(value: datetime) -> datetime:
    """Move a datetime to 23:59:59 of the same calendar day"""
    return value.replace(hour=23, minute=59, second=59, microsecond=0)


def format_date(dt: DateLike, fmt: str = '%Y/%m/%d') -> str:
    """Format date to string, returning the raw value when unparsable"""
    if dt is None or dt == '':
        return ''

    try:
        parsed = parse_record_date(dt)
    except ValueError:
        return str(dt)

    return parsed.strftime(fmt) if parsed else ''


# ==================== Number Formatting ====================

def format_number(value: Union[int, float, Decimal, None],
                 decimal_places: int = 2,
                 use_thousands_separator: bool = True) -> str:
    """Format number with precision and separators"""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return "0"

    try:
        if not isinstance(value, Decimal):
            value = Decimal(str(value))

        quantize_str = '0.' + '0' * decimal_places if decimal_places > 0 else '0'
        value = value.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP)

        if use_thousands_separator:
            return f"{value:,}"
        return str(value)

    except Exception as e:
        logger.error(f"Error formatting number {value}: {e}")
        return str(value)


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce a stored quantity to float, using default for blanks and junk"""
    if value is None or value == '':
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def calculate_percentage(numerator: Union[int, float],
                        denominator: Union[int, float],
                        decimal_places: int = 1) -> float:
    """Calculate percentage safely"""
    if not denominator:
        return 0.0
    return round((float(numerator) / float(denominator)) * 100, decimal_places)


# ==================== Records ====================

def generate_record_id() -> str:
    """New unique record identifier"""
    return uuid.uuid4().hex


def lookup_name(items: List[Dict[str, Any]], item_id: Any) -> str:
    """Resolve a master data id to its name, falling back to the id itself"""
    if item_id is None or item_id == '':
        return ''
    for item in items or []:
        if str(item.get('id')) == str(item_id):
            return str(item.get('name') or item_id)
    return str(item_id)


def records_to_dataframe(records: List[Dict[str, Any]],
                         master_data: Optional[Dict[str, List[Dict[str, Any]]]] = None,
                         language: Optional[str] = None,
                         include_id: bool = False) -> pd.DataFrame:
    """
    Build a display DataFrame of records with localized headers

    Args:
        records: Production data records
        master_data: Optional {'products': [...], 'processes': [...], 'workers': [...]}
            used to show names instead of ids
        language: Label language
        include_id: Keep the id column (first position)
    """
    fields = list(ProductionDataConstants.EXPORT_FIELDS)
    if include_id:
        fields.insert(0, ProductionDataConstants.FIELD_ID)

    df = pd.DataFrame([{f: record.get(f) for f in fields} for record in records], columns=fields)

    if master_data:
        name_columns = {
            ProductionDataConstants.FIELD_PRODUCT: master_data.get('products', []),
            ProductionDataConstants.FIELD_PROCESS: master_data.get('processes', []),
            ProductionDataConstants.FIELD_WORKER: master_data.get('workers', []),
        }
        for column, items in name_columns.items():
            if items:
                df[column] = df[column].apply(lambda x, items=items: lookup_name(items, x))

    for column in ProductionDataConstants.NUMERIC_FIELDS:
        df[column] = pd.to_numeric(df[column], errors='coerce')

    df[ProductionDataConstants.FIELD_NOTES] = df[ProductionDataConstants.FIELD_NOTES].fillna('')

    return df.rename(columns={f: get_field_label(f, language) for f in fields})


# ==================== UI Helpers ====================

def show_message(message: str, level: str = "info"):
    """Banner for a controller message; unknown levels render as info"""
    banners = {
        "success": st.success,
        "error": st.error,
        "warning": st.warning,
    }
    banners.get(level, st.info)(message)
