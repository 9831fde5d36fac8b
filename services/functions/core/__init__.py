"""
Core logic package.

Provides route matching, error normalization and runtime support checks.
"""

from .errors import format_error, handle_error, normalize_error
from .routes import match_url_path, normalize_path
from .schedule import next_run
from .storage import BLOBS_INFO_HEADER, encode_storage_context
from .versions import is_runtime_supported

__all__ = [
    "format_error",
    "handle_error",
    "normalize_error",
    "match_url_path",
    "normalize_path",
    "next_run",
    "BLOBS_INFO_HEADER",
    "encode_storage_context",
    "is_runtime_supported",
]
