"""
Service modules for the SEC change feed.
Handles EDGAR access, storage and report output.
"""

from .edgar_client import EdgarClient
from .storage import JsonFileStore, JsonlDataset
from .report import build_report, report_to_markdown, rows_to_csv

__all__ = [
    'EdgarClient',
    'JsonFileStore',
    'JsonlDataset',
    'build_report',
    'report_to_markdown',
    'rows_to_csv',
]
