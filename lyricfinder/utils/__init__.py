"""
Utilities package
Logging configuration and common helper functions
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    OperationLogger,
    create_operation_logger,
    log_performance,
    get_current_log_file
)
from .helpers import (
    normalize_query,
    normalize_name,
    collapse_blank_lines,
    truncate_string,
    retry_on_failure
)

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'OperationLogger',
    'create_operation_logger',
    'log_performance',
    'get_current_log_file',

    # Helper exports
    'normalize_query',
    'normalize_name',
    'collapse_blank_lines',
    'truncate_string',
    'retry_on_failure',
]
