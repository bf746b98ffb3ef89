"""
EDGAR client - submission history, filing index, documents and the bulk
ticker table, fetched over HTTP with SEC headers, a per-call timeout and
the shared rate limiter.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from core.extraction import html_to_text
from core.faults import ParseFault, TransportFault
from utils.common import RateLimiter, get_sec_headers
from utils.identifiers import filing_document_url, filing_folder_url

logger = logging.getLogger(__name__)

SUBMISSIONS_URL = "https://data.sec.gov/submissions/CIK{cik}.json"
TICKERS_URL = "https://www.sec.gov/files/company_tickers.json"


def is_html_document(doc_name: str) -> bool:
    return doc_name.lower().endswith((".htm", ".html"))


class EdgarClient:
    """Blocking SEC EDGAR client; every call honors `timeout` and raises faults."""

    def __init__(
        self,
        user_agent: str,
        timeout: float = 30.0,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.rate_limiter = rate_limiter or RateLimiter(max_requests_per_second=10)
        self.session = session or requests.Session()
        self.session.headers.update(get_sec_headers(user_agent))

    def _get(self, url: str) -> requests.Response:
        with self.rate_limiter:
            try:
                response = self.session.get(url, timeout=self.timeout)
            except requests.Timeout as e:
                raise TransportFault(f"Timed out after {self.timeout}s: {url}", url=url) from e
            except requests.RequestException as e:
                raise TransportFault(f"Request failed for {url}: {e}", url=url) from e

        if response.status_code >= 400:
            raise TransportFault(
                f"HTTP {response.status_code} for {url}: {response.text[:500]}",
                url=url,
                status_code=response.status_code,
            )
        return response

    def _get_json(self, url: str) -> Any:
        response = self._get(url)
        try:
            return response.json()
        except ValueError as e:
            raise ParseFault(f"Invalid JSON from {url}: {e}") from e

    def get_submissions(self, cik10: str) -> Dict[str, Any]:
        """Submission history: {name, tickers, filings: {recent: parallel arrays}}."""
        data = self._get_json(SUBMISSIONS_URL.format(cik=cik10))
        if not isinstance(data, dict):
            raise ParseFault(f"Unexpected submissions payload for CIK {cik10}")
        return data

    def get_filing_index(self, cik10: str, accession_number: str) -> List[str]:
        """Names of the documents listed in a filing's index.json."""
        data = self._get_json(filing_folder_url(cik10, accession_number) + "index.json")
        try:
            items = data.get("directory", {}).get("item", []) or []
            return [item["name"] for item in items if item.get("name")]
        except (AttributeError, TypeError, KeyError) as e:
            raise ParseFault(f"Unexpected filing index for {cik10}:{accession_number}") from e

    def get_document(self, cik10: str, accession_number: str, doc_name: str) -> str:
        """Document body as plain text; HTML is reduced to text."""
        raw = self._get(filing_document_url(cik10, accession_number, doc_name)).text
        if is_html_document(doc_name):
            return html_to_text(raw)
        return raw

    def get_bulk_ticker_table(self) -> Dict[str, str]:
        """{TICKER: cik_str} from company_tickers.json (rows keyed by index)."""
        data = self._get_json(TICKERS_URL)
        if not isinstance(data, dict):
            raise ParseFault("Unexpected company tickers payload")

        table = {}
        for row in data.values():
            if not isinstance(row, dict):
                continue
            ticker = row.get("ticker")
            cik = row.get("cik_str")
            if not ticker or cik is None:
                continue
            table[str(ticker).upper()] = str(cik)
        logger.debug(f"Loaded {len(table)} tickers from SEC")
        return table
