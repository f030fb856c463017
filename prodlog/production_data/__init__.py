# prodlog/production_data/__init__.py
"""
Production Data Module
Entry, listing, filtering and export of production data records

Components:
- storage.py: Collection persistence in one storage slot (ProductionDataStorage)
- results.py: Storage outcome types (StorageResult, StorageErrorKind)
- master_data.py: Read-only products / processes / workers (MasterDataRepository)
- validators.py: Entry validation rules (validate_record)
- controller.py: Page state and event handlers (DataEntryController)
- export.py: CSV / Excel / PDF export
- forms.py, dialogs.py, dashboard.py: Streamlit components
- page.py: Main page orchestrator
- common.py: Constants, messages and formatting helpers

UI components import Streamlit; the modules re-exported here do not need
a running Streamlit session.
"""

from .storage import ProductionDataStorage
from .results import StorageResult, StorageErrorKind
from .master_data import MasterDataRepository
from .validators import (
    ValidationLevel,
    ValidationResult,
    ValidationResults,
    validate_record
)
from .controller import DataEntryController
from .export import (
    ProductionDataPDFGenerator,
    export_to_csv,
    export_to_excel,
    export_to_pdf
)
from .common import (
    ProductionDataConstants,
    get_message,
    get_local_now,
    get_local_today,
    parse_record_date,
    end_of_day,
    format_number,
    format_date,
    records_to_dataframe
)

__all__ = [
    # Main classes
    'ProductionDataStorage',
    'MasterDataRepository',
    'DataEntryController',
    'ProductionDataPDFGenerator',

    # Results & validation
    'StorageResult',
    'StorageErrorKind',
    'ValidationLevel',
    'ValidationResult',
    'ValidationResults',
    'validate_record',

    # Export
    'export_to_csv',
    'export_to_excel',
    'export_to_pdf',

    # Common utilities
    'ProductionDataConstants',
    'get_message',
    'get_local_now',
    'get_local_today',
    'parse_record_date',
    'end_of_day',
    'format_number',
    'format_date',
    'records_to_dataframe',
]
