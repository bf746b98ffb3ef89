"""
Pytest configuration and shared fixtures for SEC change-feed tests.
"""

import pytest
import sys
import tempfile
from pathlib import Path
from datetime import datetime, timezone

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up mock environment variables for testing."""
    monkeypatch.setenv('SEC_USER_AGENT', 'Test User test@example.com')
    monkeypatch.setenv('OPENROUTER_API_KEY', 'sk-or-v1-test-key-12345')
    monkeypatch.setenv('OPENROUTER_MODEL', 'deepseek/deepseek-chat-v3.1:free')


@pytest.fixture
def clean_env(monkeypatch):
    """Remove environment variables for testing missing config scenarios."""
    for name in ('SEC_USER_AGENT', 'OPENROUTER_API_KEY', 'OPENROUTER_MODEL', 'TICKERS', 'CIKS',
                 'FORMS', 'START_DATE', 'END_DATE', 'BACKFILL', 'OUTPUT_FORMATS'):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Temporary File/Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# =============================================================================
# Fake EDGAR client
# =============================================================================

class FakeEdgarClient:
    """
    In-memory stand-in for services.edgar_client.EdgarClient.

    Submissions are keyed by 10 digit CIK, indexes and documents by
    accession number. Anything missing raises TransportFault like a 404.
    """

    def __init__(self, submissions=None, indexes=None, documents=None, ticker_table=None):
        self.submissions = dict(submissions or {})
        self.indexes = dict(indexes or {})
        self.documents = dict(documents or {})
        self.ticker_table = ticker_table
        self.calls = []

    def _missing(self, what):
        from core.faults import TransportFault
        return TransportFault(f"HTTP 404 for {what}", status_code=404)

    def get_submissions(self, cik10):
        self.calls.append(('submissions', cik10))
        if cik10 not in self.submissions:
            raise self._missing(f"CIK{cik10}.json")
        return self.submissions[cik10]

    def get_filing_index(self, cik10, accession_number):
        self.calls.append(('index', accession_number))
        if accession_number not in self.indexes:
            raise self._missing(f"{accession_number}/index.json")
        return list(self.indexes[accession_number])

    def get_document(self, cik10, accession_number, doc_name):
        self.calls.append(('document', accession_number))
        if accession_number not in self.documents:
            raise self._missing(f"{accession_number}/{doc_name}")
        return self.documents[accession_number]

    def get_bulk_ticker_table(self):
        self.calls.append(('tickers',))
        if self.ticker_table is None:
            raise self._missing("company_tickers.json")
        return dict(self.ticker_table)


def make_submissions(name, tickers, rows):
    """Build a submissions payload with filings.recent parallel arrays."""
    columns = ['accessionNumber', 'filingDate', 'reportDate', 'acceptanceDateTime',
               'form', 'fileNumber', 'items', 'primaryDocument', 'size']
    recent = {col: [row.get(col, '') for row in rows] for col in columns}
    return {'name': name, 'tickers': list(tickers), 'filings': {'recent': recent}}


@pytest.fixture
def fake_edgar_client():
    """Factory for FakeEdgarClient instances."""
    return FakeEdgarClient


@pytest.fixture
def submissions_factory():
    return make_submissions


@pytest.fixture
def fixed_clock():
    """Clock pinned to 2025-02-01 12:00 UTC."""
    moment = datetime(2025, 2, 1, 12, 0, 0, tzinfo=timezone.utc)
    return lambda: moment


# =============================================================================
# Mock Data Fixtures
# =============================================================================

@pytest.fixture
def sample_company_tickers():
    """Sample company tickers data from SEC."""
    return {
        "0": {"cik_str": 320193, "ticker": "AAPL", "title": "Apple Inc."},
        "1": {"cik_str": 1045810, "ticker": "NVDA", "title": "NVIDIA CORP"},
        "2": {"cik_str": 789019, "ticker": "MSFT", "title": "MICROSOFT CORP"},
        "3": {"cik_str": 1318605, "ticker": "TSLA", "title": "Tesla, Inc."},
        "4": {"cik_str": 1652044, "ticker": "GOOGL", "title": "Alphabet Inc."},
    }


@pytest.fixture
def sample_sec_submissions():
    """Sample SEC submissions API response (newest first)."""
    return {
        "cik": "320193",
        "entityType": "operating",
        "sic": "3571",
        "sicDescription": "Electronic Computers",
        "name": "Apple Inc.",
        "tickers": ["AAPL"],
        "filings": {
            "recent": {
                "accessionNumber": [
                    "0000320193-25-000010",
                    "0000320193-25-000008",
                    "0000320193-25-000005",
                    "0000320193-24-000090",
                    "0000320193-24-000080"
                ],
                "filingDate": [
                    "2025-02-01",
                    "2025-01-20",
                    "2025-01-10",
                    "2024-12-20",
                    "2024-11-01"
                ],
                "reportDate": [
                    "2024-09-28",
                    "2025-01-20",
                    "2024-09-28",
                    "",
                    "2023-09-30"
                ],
                "form": [
                    "10-K/A",
                    "8-K",
                    "10-K",
                    "4",
                    "10-K"
                ],
                "items": [
                    "",
                    "2.02,9.01",
                    "",
                    "",
                    ""
                ],
                "primaryDocument": [
                    "aapl-10ka.htm",
                    "aapl-8k.htm",
                    "aapl-20240928.htm",
                    "xslF345X03/doc4.xml",
                    "aapl-20230930.htm"
                ]
            }
        }
    }


# =============================================================================
# Document Content Fixtures
# =============================================================================

@pytest.fixture
def sample_filing_html():
    """Sample 10-K filing HTML content."""
    return '''<!DOCTYPE html>
<html>
<head><title>Apple Inc. 10-K</title></head>
<body>
<div class="header">
    <h1>Apple Inc. - Annual Report</h1>
</div>
<h2>Item 1A. Risk Factors</h2>
<p>Our business faces supply chain concentration and market competition.</p>
<h2>Item 1B. Unresolved Staff Comments</h2>
<p>None.</p>
<h2>Item 8. Financial Statements and Supplementary Data</h2>
<table>
    <tr><td>Revenue</td><td>$394.3&nbsp;billion</td></tr>
    <tr><td>Net Income</td><td>$96.9 billion</td></tr>
</table>
<h2>Item 9. Changes in and Disagreements with Accountants</h2>
<p>None.</p>
<script>console.log("test");</script>
<style>.test { color: red; }</style>
</body>
</html>'''


@pytest.fixture
def sample_filing_text():
    """Plain-text 10-K body as produced by html_to_text."""
    return (
        "Apple Inc. - Annual Report\n"
        "Item 1A. Risk Factors\n"
        "Our business faces supply chain concentration and market competition.\n"
        "Item 1B. Unresolved Staff Comments\n"
        "None.\n"
        "Item 8. Financial Statements and Supplementary Data\n"
        "Revenue $394.3 billion\n"
        "Item 9. Changes in and Disagreements with Accountants\n"
        "None."
    )
