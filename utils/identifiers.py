"""
Identifier helpers for SEC filers, accession numbers and form designations.
"""

import re
from typing import Iterable

CIK_WIDTH = 10

_NON_DIGITS = re.compile(r"\D")
_AMENDMENT_SUFFIX = re.compile(r"/A\b")
_WHITESPACE = re.compile(r"\s+")

# Bare ownership codes that EDGAR files under the full schedule name
FORM_ALIASES = {
    "13D": "SC 13D",
    "13G": "SC 13G",
}


def normalize_cik(raw) -> str:
    """
    Canonicalize a CIK into its zero-padded 10 digit form.

    Args:
        raw: CIK as int or string, possibly with separators or a "CIK" prefix

    Returns:
        10 digit CIK string (e.g. "0000320193")

    Raises:
        ValueError: If the input has no digits or more digits than fit
    """
    digits = _NON_DIGITS.sub("", str(raw))
    if not digits:
        raise ValueError(f"Invalid CIK: {raw!r}")
    if len(digits) > CIK_WIDTH:
        raise ValueError(f"CIK has more than {CIK_WIDTH} digits: {raw!r}")
    return digits.zfill(CIK_WIDTH)


def cik_to_archive_segment(cik10: str) -> str:
    """Archive URLs address filers by the CIK without leading zeros."""
    return str(int(cik10))


def strip_accession_dashes(accession: str) -> str:
    return str(accession).replace("-", "")


def is_amendment_form(form_type: str) -> bool:
    """True for amended forms such as 10-K/A or S-1/A."""
    return bool(_AMENDMENT_SUFFIX.search(str(form_type or "")))


def base_form_type(form_type: str) -> str:
    """Form designation with the amendment suffix and extra whitespace removed."""
    collapsed = _WHITESPACE.sub(" ", str(form_type or ""))
    return _AMENDMENT_SUFFIX.sub("", collapsed).strip()


def normalize_form_type(form_type: str) -> str:
    """Map bare ownership codes (13D/13G) to their EDGAR form names."""
    form = str(form_type or "").strip()
    return FORM_ALIASES.get(form.upper(), form)


def form_matches(form_type: str, allowed: Iterable[str]) -> bool:
    """
    Check a (normalized) form designation against the configured form set.

    Shorthand entries in the allow-list match their full names, so "13D"
    accepts "SC 13D".
    """
    allowed = set(allowed)
    if form_type in allowed:
        return True
    return any(FORM_ALIASES.get(a.upper()) == form_type for a in allowed)


ARCHIVES_URL = "https://www.sec.gov/Archives/edgar/data"


def filing_folder_url(cik10: str, accession_number: str) -> str:
    """Archive folder of a filing, e.g. .../data/320193/000032019325000001/"""
    return f"{ARCHIVES_URL}/{cik_to_archive_segment(cik10)}/{strip_accession_dashes(accession_number)}/"


def filing_document_url(cik10: str, accession_number: str, doc_name: str = "") -> str:
    return filing_folder_url(cik10, accession_number) + (doc_name or "")
