"""
Change classifier: fingerprint each candidate filing and decide whether it
is new, an amendment, an update to an already seen filing, or nothing to report.
"""
import logging
import re
from typing import List, Optional

from core.extraction import DEFAULT_MAX_SECTION_CHARS, extract_key_sections
from core.faults import Result
from core.fingerprint import compute_fingerprint
from core.tracker import DetectionState
from schemas.filings import ChangeRecord, ExtractedSections, FilingRecord, filing_key
from utils.identifiers import (
    base_form_type,
    filing_document_url,
    filing_folder_url,
    is_amendment_form,
    normalize_form_type,
)

logger = logging.getLogger(__name__)

_HTML_DOC = re.compile(r"\.html?$", re.IGNORECASE)
_TEXT_DOC = re.compile(r"\.txt$", re.IGNORECASE)


def pick_primary_document(names: List[str]) -> Optional[str]:
    """Prefer the first HTML document, then plain text, then whatever is listed first."""
    for pattern in (_HTML_DOC, _TEXT_DOC):
        for name in names:
            if pattern.search(name):
                return name
    return names[0] if names else None


def classify_change(
    state: DetectionState,
    key: str,
    fingerprint: str,
    is_amendment: bool,
) -> Optional[str]:
    """
    Decide the change type for a fingerprinted filing.

    - "update" when the filing was seen before, has a stored fingerprint,
      and the new fingerprint differs
    - "amendment" / "new" when it was never seen
    - None when it was seen and is unchanged (nothing to report)
    """
    seen_entry = state.seen.get(key)
    prior_fingerprint = state.fingerprints.get(key)

    if seen_entry and prior_fingerprint and prior_fingerprint != fingerprint:
        return "update"
    if not seen_entry:
        return "amendment" if is_amendment else "new"
    return None


class ChangeClassifier:
    """Fetches, fingerprints and classifies candidate filings against DetectionState."""

    def __init__(
        self,
        client,
        state: DetectionState,
        parse_sections: bool = True,
        max_section_chars: int = DEFAULT_MAX_SECTION_CHARS,
    ):
        self.client = client
        self.state = state
        self.parse_sections = parse_sections
        self.max_section_chars = max_section_chars

    def _resolve_document(self, cik: str, record: FilingRecord) -> Optional[str]:
        index = Result.attempt(self.client.get_filing_index, cik, record.accession_number)
        if not index.ok:
            logger.info(f"Filing index unavailable for {cik}:{record.accession_number}: {index.fault}")
            return record.primary_document or None
        return record.primary_document or pick_primary_document(index.value)

    def _extract_sections(self, cik: str, record: FilingRecord, doc_name: Optional[str]) -> ExtractedSections:
        if not self.parse_sections or not doc_name:
            return ExtractedSections()

        document = Result.attempt(self.client.get_document, cik, record.accession_number, doc_name)
        if not document.ok:
            logger.warning(
                f"Document fetch failed for {cik}:{record.accession_number}, "
                f"falling back to metadata-only fingerprint: {document.fault}"
            )
            return ExtractedSections()
        return extract_key_sections(document.value, self.max_section_chars)

    def inspect(
        self,
        cik: str,
        ticker: Optional[str],
        company_name: str,
        record: FilingRecord,
    ) -> Optional[ChangeRecord]:
        """
        Classify one candidate.

        Returns:
            A ChangeRecord to emit, or None when the filing is already known
            and unchanged
        """
        key = filing_key(cik, record.accession_number)
        if key in self.state.seen and key not in self.state.fingerprints:
            # Seen without a fingerprint can never be reported as an update
            return None

        form = normalize_form_type(record.form_type)
        amendment = is_amendment_form(form)

        doc_name = self._resolve_document(cik, record)
        sections = self._extract_sections(cik, record, doc_name)
        fingerprint = compute_fingerprint(record.accession_number, form, record.filing_date, sections)

        change_type = classify_change(self.state, key, fingerprint, amendment)
        if change_type is None:
            return None

        return ChangeRecord(
            cik=cik,
            ticker=ticker,
            company_name=company_name,
            form_type=form,
            base_form_type=base_form_type(form),
            is_amendment=amendment,
            accession_number=record.accession_number,
            filing_date=record.filing_date,
            report_date=record.report_date,
            primary_document=doc_name or "",
            filing_url=(
                filing_document_url(cik, record.accession_number, doc_name)
                if doc_name else filing_folder_url(cik, record.accession_number)
            ),
            items=record.items,
            file_number=record.file_number,
            acceptance_date_time=record.acceptance_date_time,
            sections=sections,
            fingerprint=fingerprint,
            change_type=change_type,
        )
