"""
Filing Schemas
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ChangeType = Literal["new", "amendment", "update"]


def filing_key(cik: str, accession_number: str) -> str:
    """State key for a filing: '<cik10>:<accession>'."""
    return f"{cik}:{accession_number}"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class FilerTarget(_Record):
    """A filer being watched, identified by its 10 digit CIK."""
    cik: str
    ticker: Optional[str] = None


class FilingRecord(_Record):
    """One row of a filer's submission history."""
    accession_number: str
    form_type: str
    filing_date: str = ""
    report_date: str = ""
    acceptance_date_time: str = ""
    file_number: str = ""
    items: str = ""
    primary_document: str = ""
    size: Optional[int] = None


class ExtractedSections(_Record):
    risk_factors: str = ""
    financial_statements: str = ""


class ChangeRecord(_Record):
    """A filing surfaced by a run as new, amended or updated."""
    cik: str
    ticker: Optional[str] = None
    company_name: str = ""
    form_type: str
    base_form_type: str
    is_amendment: bool = False
    accession_number: str
    filing_date: str = ""
    report_date: str = ""
    primary_document: str = ""
    filing_url: Optional[str] = None
    items: str = ""
    file_number: str = ""
    acceptance_date_time: str = ""
    sections: ExtractedSections = Field(default_factory=ExtractedSections)
    fingerprint: str
    change_type: ChangeType
    prior_accession_number: Optional[str] = None
    prior_filing_url: Optional[str] = None

    @property
    def key(self) -> str:
        return filing_key(self.cik, self.accession_number)
