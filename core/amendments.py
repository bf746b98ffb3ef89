"""
Amendment resolver: link each amendment to the latest earlier original filing
of the same base form.
"""
import logging
from typing import Iterable, List, Optional

from core.faults import Result
from core.poller import project_recent_filings
from schemas.filings import ChangeRecord, FilingRecord
from utils.common import parse_iso_date
from utils.identifiers import (
    base_form_type,
    filing_folder_url,
    is_amendment_form,
    normalize_form_type,
)

logger = logging.getLogger(__name__)


def find_prior_filing(amendment: ChangeRecord, history: Iterable[FilingRecord]) -> Optional[FilingRecord]:
    """
    Latest non-amendment filing of the amendment's base form dated strictly
    before it. The greatest filing date wins; ties keep history order.
    """
    filed = parse_iso_date(amendment.filing_date)
    if filed is None:
        return None

    target_base = base_form_type(amendment.form_type)
    best: Optional[FilingRecord] = None
    best_date = None
    for record in history:
        form = normalize_form_type(record.form_type)
        if is_amendment_form(form) or base_form_type(form) != target_base:
            continue
        record_date = parse_iso_date(record.filing_date)
        if record_date is None or record_date >= filed:
            continue
        if best_date is None or record_date > best_date:
            best, best_date = record, record_date
    return best


class AmendmentResolver:
    """Adds prior-filing references to amendment records; lookups never fail the run."""

    def __init__(self, client):
        self.client = client

    def resolve(self, change: ChangeRecord) -> ChangeRecord:
        if not change.is_amendment:
            return change

        submissions = Result.attempt(self.client.get_submissions, change.cik)
        if not submissions.ok:
            logger.info(f"Prior filing lookup skipped for {change.key}: {submissions.fault}")
            return change

        prior = find_prior_filing(change, project_recent_filings(submissions.value))
        if prior is None:
            logger.info(f"No prior {change.base_form_type} found for amendment {change.key}")
            return change

        return change.model_copy(update={
            "prior_accession_number": prior.accession_number,
            "prior_filing_url": filing_folder_url(change.cik, prior.accession_number),
        })

    def resolve_all(self, changes: List[ChangeRecord]) -> List[ChangeRecord]:
        return [self.resolve(change) for change in changes]
