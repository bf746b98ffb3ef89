"""
Enrichment text for change records: a heuristic note and the summarization prompt.
"""
from typing import Optional

from schemas.filings import ChangeRecord

PROMPT_SECTION_CHARS = 8000


def heuristic_change_summary(change: ChangeRecord) -> str:
    """One-line note built from metadata and section excerpt lengths."""
    parts = [
        f"Amendment detected ({change.form_type})" if change.is_amendment
        else f"New filing detected ({change.form_type})"
    ]
    if change.filing_date:
        parts.append(f"Filing date: {change.filing_date}")
    if change.sections.risk_factors:
        parts.append(f"Risk Factors excerpt length: {len(change.sections.risk_factors)} chars")
    if change.sections.financial_statements:
        parts.append(f"Financial Statements excerpt length: {len(change.sections.financial_statements)} chars")
    return " • ".join(parts)


def build_prompt(change: ChangeRecord, heuristic: Optional[str] = None) -> str:
    """Summarization prompt for one change record."""
    risk = change.sections.risk_factors[:PROMPT_SECTION_CHARS]
    fin = change.sections.financial_statements[:PROMPT_SECTION_CHARS]

    lines = [
        "You are an analyst summarizing changes in SEC filings for monitoring purposes.",
        "",
        "Task: Summarize what is new or changed in this filing (and if it is an amendment, "
        "highlight what changed vs the prior version).",
        'Return: (1) 3-7 bullet key changes, (2) 1 short risk note, (3) 1 short "why it matters" line.',
        "",
        "Metadata:",
        f"- Company: {change.company_name} ({change.ticker or 'n/a'}) CIK {change.cik}",
        f"- Form: {change.form_type} ({change.change_type})",
        f"- Filing date: {change.filing_date or 'n/a'}",
        f"- Accession: {change.accession_number}",
        f"- Filing URL: {change.filing_url or 'n/a'}",
    ]
    if change.prior_accession_number:
        lines.append(f"- Prior (best guess): {change.prior_accession_number} {change.prior_filing_url or ''}".rstrip())
    lines += [
        "",
        f"Heuristic context: {heuristic or heuristic_change_summary(change)}",
        "",
        "Extracted Risk Factors (excerpt):",
        risk or "(none)",
        "",
        "Extracted Financial Statements (excerpt):",
        fin or "(none)",
    ]
    return "\n".join(lines)
