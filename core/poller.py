"""
Submission poller: fetch each watched filer's recent history under a bounded
worker pool, project it into FilingRecords and hand form/date-filtered
candidates to the change classifier.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError
from tqdm import tqdm

from core.faults import ParseFault, Result
from schemas.filings import ChangeRecord, FilerTarget, FilingRecord
from utils.common import in_date_range
from utils.identifiers import form_matches, normalize_form_type

logger = logging.getLogger(__name__)


def _mapping(parent: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = parent.get(name) or {}
    if not isinstance(value, dict):
        raise ParseFault(f"Malformed submissions payload: '{name}' is {type(value).__name__}, expected object")
    return value


def _column(recent: Dict[str, Any], name: str, index: int, default: Any = "") -> Any:
    values = recent.get(name) or []
    if not isinstance(values, list):
        raise ParseFault(f"Malformed submissions payload: column '{name}' is not an array")
    if index < len(values) and values[index] not in (None, ""):
        return values[index]
    return default


def project_recent_filings(submissions: Dict[str, Any]) -> List[FilingRecord]:
    """
    Turn the index-aligned arrays of filings.recent into one record per index.

    Rows without an accession number or form designation are dropped.

    Raises:
        ParseFault: If filings.recent or one of its columns has the wrong shape
    """
    recent = _mapping(_mapping(submissions or {}, "filings"), "recent")
    accessions = recent.get("accessionNumber") or []
    if not isinstance(accessions, list):
        raise ParseFault("Malformed submissions payload: column 'accessionNumber' is not an array")

    records = []
    for i, accession in enumerate(accessions):
        form = str(_column(recent, "form", i)).strip()
        if not accession or not form:
            continue
        size = _column(recent, "size", i, None)
        try:
            records.append(FilingRecord(
                accession_number=str(accession),
                form_type=form,
                filing_date=str(_column(recent, "filingDate", i)),
                report_date=str(_column(recent, "reportDate", i)),
                acceptance_date_time=str(_column(recent, "acceptanceDateTime", i)),
                file_number=str(_column(recent, "fileNumber", i)),
                items=str(_column(recent, "items", i)),
                primary_document=str(_column(recent, "primaryDocument", i)),
                size=int(size) if isinstance(size, (int, float)) else None,
            ))
        except ValidationError as e:
            raise ParseFault(f"Malformed submissions row {i}: {e}") from e
    return records


def filter_candidates(
    records: Iterable[FilingRecord],
    forms: Iterable[str],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[FilingRecord]:
    """
    Keep records whose (normalized) form is allowed and whose filing date
    falls in the inclusive window. With a window active, undated records
    are dropped. Source order is preserved.
    """
    forms = set(forms)
    window_active = bool(start_date or end_date)
    kept = []
    for record in records:
        if not form_matches(normalize_form_type(record.form_type), forms):
            continue
        if window_active and not in_date_range(record.filing_date, start_date, end_date):
            continue
        kept.append(record)
    return kept


class SubmissionPoller:
    """Scans watched filers concurrently; one failed filer never stops the others."""

    def __init__(
        self,
        client,
        classifier,
        forms: Iterable[str],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        max_filings_per_company: int = 200,
        max_workers: int = 4,
        show_progress: bool = False,
    ):
        self.client = client
        self.classifier = classifier
        self.forms = set(forms)
        self.start_date = start_date
        self.end_date = end_date
        self.max_filings_per_company = max_filings_per_company
        self.max_workers = max(1, max_workers)
        self.show_progress = show_progress

    def scan_target(self, target: FilerTarget) -> List[ChangeRecord]:
        """
        Fetch one filer's history and classify its candidates in history order.

        Raises:
            TransportFault/ParseFault: If the submission history is unavailable
                or malformed
        """
        submissions = self.client.get_submissions(target.cik)
        if not isinstance(submissions, dict):
            raise ParseFault(f"Malformed submissions payload for CIK {target.cik}")
        company_name = str(submissions.get("name") or "")
        listed = submissions.get("tickers") or []
        if not isinstance(listed, list):
            listed = []
        ticker = target.ticker or (str(listed[0]) if listed and listed[0] else None)

        history = project_recent_filings(submissions)[: self.max_filings_per_company]
        candidates = filter_candidates(history, self.forms, self.start_date, self.end_date)
        logger.debug(f"{target.cik}: {len(candidates)} candidate filings of {len(history)} scanned")

        changes = []
        for record in candidates:
            change = self.classifier.inspect(target.cik, ticker, company_name, record)
            if change is not None:
                changes.append(change)
        return changes

    def poll(self, targets: List[FilerTarget]) -> List[ChangeRecord]:
        """
        Scan all targets under a pool of `max_workers` threads.

        Order across filers follows completion; within a filer the history
        order is kept.
        """
        results: List[ChangeRecord] = []
        failed = 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_target = {
                executor.submit(Result.attempt, self.scan_target, target): target
                for target in targets
            }
            with tqdm(total=len(targets), desc="Scanning filers", unit="filer",
                      disable=not self.show_progress) as pbar:
                for future in as_completed(future_to_target):
                    target = future_to_target[future]
                    outcome = future.result()
                    if outcome.ok:
                        results.extend(outcome.value)
                    else:
                        failed += 1
                        logger.warning(f"Skipping CIK {target.cik} ({target.ticker or 'n/a'}): {outcome.fault}")
                    pbar.update(1)

        if failed:
            logger.info(f"{failed} of {len(targets)} filers skipped after fetch failures")
        return results
