"""Lookup module - symbol and file lookups for unresolved names."""

from dccsift.lookup.ops import LookupClient, extract_quoted_name
from dccsift.lookup.protocols import RESPONSE_FORMATS, ResponseFormat, get_response_format

__all__ = [
    "LookupClient",
    "RESPONSE_FORMATS",
    "ResponseFormat",
    "extract_quoted_name",
    "get_response_format",
]
