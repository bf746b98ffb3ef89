"""
Core detection modules for the SEC change feed.
Pipeline: resolve targets → poll submissions → classify → link amendments
"""

from .faults import (
    ChangeFeedError,
    ConfigurationFault,
    TransportFault,
    ParseFault,
    Result,
)
from .extraction import html_to_text, extract_section, extract_key_sections
from .fingerprint import compute_fingerprint

__all__ = [
    'ChangeFeedError',
    'ConfigurationFault',
    'TransportFault',
    'ParseFault',
    'Result',
    'html_to_text',
    'extract_section',
    'extract_key_sections',
    'compute_fingerprint',
]
