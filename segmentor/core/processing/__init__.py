# segmentor/core/processing/__init__.py

from .load_data import DataLoader
from .header_processing import (
    HeaderPredicate,
    HeaderResolution,
    find_header,
    find_optional_headers,
    process_headers,
    extract_scale_from_header,
    detect_possible_scales,
)
from .date_processing import date_format_from_header, parse_date_string, format_date
from .id_sequence import IdSequence
from .duplicate_checker import (
    DuplicateCheckService,
    DuplicateReport,
    check_for_duplicate,
    detect_batch_duplicates,
)
from .import_validator import ImportResult, ImportValidationPipeline, validate_rows

__all__ = [
    # Loading raw import files
    'DataLoader',

    # Header and date handling
    'HeaderPredicate',
    'HeaderResolution',
    'find_header',
    'find_optional_headers',
    'process_headers',
    'extract_scale_from_header',
    'detect_possible_scales',
    'date_format_from_header',
    'parse_date_string',
    'format_date',

    # Identity and duplicates
    'IdSequence',
    'DuplicateCheckService',
    'DuplicateReport',
    'check_for_duplicate',
    'detect_batch_duplicates',

    # Import pipeline
    'ImportResult',
    'ImportValidationPipeline',
    'validate_rows',
]
