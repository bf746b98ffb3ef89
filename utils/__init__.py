"""
Utility modules for the SEC change feed.
Shared helpers, identifiers, configuration and the ticker lookup.
"""

from .common import (
    get_sec_headers,
    RateLimiter,
    parse_iso_date,
    in_date_range,
    format_utc,
)
from .identifiers import (
    normalize_cik,
    cik_to_archive_segment,
    strip_accession_dashes,
    is_amendment_form,
    base_form_type,
    normalize_form_type,
    form_matches,
    filing_folder_url,
    filing_document_url,
)

__all__ = [
    'get_sec_headers',
    'RateLimiter',
    'parse_iso_date',
    'in_date_range',
    'format_utc',
    'normalize_cik',
    'cik_to_archive_segment',
    'strip_accession_dashes',
    'is_amendment_form',
    'base_form_type',
    'normalize_form_type',
    'form_matches',
    'filing_folder_url',
    'filing_document_url',
]
