"""
Utility modules for the WDBX codec.
"""

from .logging import (
    get_log_file,
    init_log_file,
    log_error,
    log_warning,
    update_log_file_path,
)

__all__ = [
    "get_log_file",
    "init_log_file",
    "log_error",
    "log_warning",
    "update_log_file_path",
]
