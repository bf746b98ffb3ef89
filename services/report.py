"""
Run report (JSON + Markdown) and CSV export of enriched change rows.
"""
import csv
import io
from collections import Counter
from typing import Dict, List, Optional

TOP_CHANGES = 50

CSV_FIELDS = [
    "runStartedAt", "changeType", "ticker", "cik", "companyName", "formType", "filingDate",
    "reportDate", "accessionNumber", "isAmendment", "filingUrl", "primaryDocument", "items",
    "fileNumber", "acceptanceDateTime", "priorAccessionNumber", "priorFilingUrl",
    "heuristicSummary", "aiSummary", "sections.riskFactors", "sections.financialStatements",
]


def build_report(
    rows: List[Dict],
    run_started_at: str,
    first_run: bool,
    backfill: bool,
    suppress_history: bool,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Dict:
    """Totals by change type, form and company plus the first TOP_CHANGES rows."""
    by_type = {"new": 0, "amendment": 0, "update": 0}
    by_type.update(Counter(r["changeType"] for r in rows))
    by_form = Counter(r["formType"] for r in rows)
    by_company = Counter(f"{r.get('companyName', '')} ({r.get('ticker') or r['cik']})" for r in rows)

    return {
        "runStartedAt": run_started_at,
        "firstRun": first_run,
        "backfill": backfill,
        "suppressHistory": suppress_history,
        "effectiveDateRange": {"startDate": start_date or "", "endDate": end_date or ""},
        "totals": {
            "changesDetected": len(rows),
            "byType": by_type,
            "byForm": dict(by_form),
            "byCompany": dict(by_company),
        },
        "topChanges": [
            {
                key: r.get(key)
                for key in (
                    "changeType", "companyName", "ticker", "cik", "formType", "filingDate",
                    "accessionNumber", "filingUrl", "aiSummary", "heuristicSummary",
                )
            }
            for r in rows[:TOP_CHANGES]
        ],
    }


def report_to_markdown(report: Dict) -> str:
    lines = [
        "# SEC Filing Change Report",
        f"- Run started: {report['runStartedAt']}",
        f"- First run: {report['firstRun']}",
        f"- Backfill: {report['backfill']}",
    ]
    window = report.get("effectiveDateRange") or {}
    if window.get("startDate") or window.get("endDate"):
        lines.append(f"- Date range: {window.get('startDate') or '…'} to {window.get('endDate') or '…'}")

    totals = report["totals"]
    lines += [
        "",
        "## Totals",
        f"- Changes detected: **{totals['changesDetected']}**",
        "- By type: " + ", ".join(f"{k}={v}" for k, v in totals["byType"].items()),
        "",
        f"## Top changes (up to {TOP_CHANGES})",
    ]
    for c in report.get("topChanges") or []:
        lines.append(
            f"- **{c['changeType'].upper()}** {c['companyName']} ({c['ticker'] or 'n/a'}) • "
            f"{c['formType']} • {c['filingDate'] or 'n/a'} • {c['accessionNumber']}"
        )
        if c.get("aiSummary"):
            lines.append(f"  - AI: {c['aiSummary'].replace(chr(10), ' ')}")
        elif c.get("heuristicSummary"):
            lines.append(f"  - Note: {c['heuristicSummary']}")
        if c.get("filingUrl"):
            lines.append(f"  - URL: {c['filingUrl']}")
    lines.append("")
    return "\n".join(lines)


def _flatten(row: Dict) -> Dict:
    flat = {}
    for key, value in row.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                flat[f"{key}.{sub_key}"] = sub_value
        else:
            flat[key] = value
    return flat


def rows_to_csv(rows: List[Dict], fields: List[str] = CSV_FIELDS) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fields, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        flat = _flatten(row)
        writer.writerow({f: "" if flat.get(f) is None else flat.get(f) for f in fields})
    return buffer.getvalue()
