"""
Content fingerprints for filings.

Section texts are hashed on their own first and the composite hashes the
identity fields plus those digests, so variable-length fields never abut.
"""

import hashlib
import json
from typing import Optional

from schemas.filings import ExtractedSections


def hash_text(text: str) -> str:
    return hashlib.sha256((text or "").encode("utf-8")).hexdigest()


def compute_fingerprint(
    accession_number: str,
    form_type: str,
    filing_date: str,
    sections: Optional[ExtractedSections] = None,
) -> str:
    """
    Deterministic SHA-256 fingerprint of a filing.

    Missing sections hash as the empty string, so "no section found" still
    produces a stable digest.
    """
    sections = sections or ExtractedSections()
    composite = json.dumps(
        {
            "accessionNumber": accession_number,
            "form": form_type,
            "filingDate": filing_date,
            "riskHash": hash_text(sections.risk_factors),
            "finHash": hash_text(sections.financial_statements),
        },
        separators=(",", ":"),
    )
    return hash_text(composite)
