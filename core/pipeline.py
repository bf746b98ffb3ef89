"""
Change-feed run: resolve targets, poll, classify, link amendments, enrich,
write the dataset and report, then persist detection state.

State is only persisted as the very last step; a run that fails earlier
leaves the previous state untouched and the same filings are detected again.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from core.amendments import AmendmentResolver
from core.classifier import ChangeClassifier
from core.enrichment import build_prompt, heuristic_change_summary
from core.poller import SubmissionPoller
from core.targets import resolve_targets
from core.tracker import FilingTracker
from schemas.filings import ChangeRecord
from services.edgar_client import EdgarClient
from services.report import build_report, report_to_markdown, rows_to_csv
from services.storage import JsonFileStore, JsonlDataset
from utils.cik import CIKLookup
from utils.common import RateLimiter, format_utc, parse_iso_date
from utils.config import Settings

logger = logging.getLogger(__name__)

DATASET_FILE = "dataset.jsonl"
NO_TARGETS_MESSAGE = "No targets provided. Set TICKERS and/or CIKS."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunResult:
    run_started_at: str
    first_run: bool
    targets: int = 0
    rows: List[Dict] = field(default_factory=list)
    report: Dict = field(default_factory=dict)
    message: Optional[str] = None

    @property
    def changes_detected(self) -> int:
        return len(self.rows)


def effective_window(
    start: Optional[date],
    end: Optional[date],
    first_run: bool,
    backfill: bool,
    backfill_days: int,
    today: date,
) -> Tuple[Optional[date], Optional[date], bool]:
    """
    Date window for this run plus the history-suppression flag.

    A first run with backfill and no explicit window looks back
    `backfill_days`. A first run without backfill or window suppresses
    everything filed before today. The suppressed history is only remembered
    up to the state key budget; anything pruned comes back as new next run.
    """
    explicit = bool(start or end)
    if first_run and backfill and not explicit:
        start = today - timedelta(days=backfill_days)
    suppress_history = first_run and not backfill and not explicit
    return start, end, suppress_history


def split_history(changes: List[ChangeRecord], run_date: date) -> Tuple[List[ChangeRecord], List[ChangeRecord]]:
    """Split into (filed on/after run_date, everything else)."""
    current, history = [], []
    for change in changes:
        filed = parse_iso_date(change.filing_date)
        (current if filed is not None and filed >= run_date else history).append(change)
    return current, history


class ChangeFeedPipeline:
    """
    One detection run over the configured watch list.

    Collaborators default to the SEC-backed implementations built from
    settings; tests pass fakes.
    """

    def __init__(
        self,
        settings: Settings,
        client=None,
        store=None,
        dataset=None,
        summarizer=None,
        clock: Callable[[], datetime] = _utc_now,
        show_progress: bool = False,
    ):
        settings.validate_for_run()
        self.settings = settings
        self.client = client or EdgarClient(
            settings.sec_user_agent,
            timeout=settings.request_timeout,
            rate_limiter=RateLimiter(max_requests_per_second=settings.sec_rate_limit),
        )
        self.store = store or JsonFileStore(settings.output_dir)
        self.dataset = dataset or JsonlDataset(f"{settings.output_dir}/{DATASET_FILE}")
        self.summarizer = summarizer if summarizer is not None else self._default_summarizer()
        self.clock = clock
        self.show_progress = show_progress

    def _default_summarizer(self):
        if not (self.settings.ai_summarize and self.settings.openrouter_api_key):
            return None
        from services.summarizer import OpenRouterSummarizer

        return OpenRouterSummarizer(self.settings.openrouter_api_key, self.settings.openrouter_model)

    def _enrich(self, change: ChangeRecord, run_started_at: str) -> Dict:
        heuristic = heuristic_change_summary(change)
        ai_summary = None
        if self.summarizer is not None:
            ai_summary = self.summarizer.summarize(build_prompt(change, heuristic))

        row = change.model_dump(by_alias=True)
        row.update({"heuristicSummary": heuristic, "aiSummary": ai_summary, "runStartedAt": run_started_at})
        return row

    def _write_outputs(self, rows: List[Dict], report: Dict) -> None:
        self.dataset.push_data(rows)
        self.store.set_value("REPORT.json", report)
        self.store.set_value("REPORT.md", report_to_markdown(report))
        if "csv" in {f.lower() for f in self.settings.output_formats}:
            self.store.set_value("OUTPUT.csv", rows_to_csv(rows))

    def run(self) -> RunResult:
        """
        Execute one run.

        Raises:
            TransportFault/ParseFault: If tickers were requested and the bulk
                ticker table cannot be fetched
        """
        settings = self.settings
        started = self.clock()
        run_started_at = format_utc(started)

        tracker = FilingTracker(self.store)
        state = tracker.state
        first_run = state.first_run

        start, end = settings.date_window()
        start, end, suppress_history = effective_window(
            start, end, first_run, settings.backfill, settings.backfill_days, started.date()
        )
        logger.info(
            f"Run started at {run_started_at} (first run: {first_run}, "
            f"window: {start or '…'} to {end or '…'}, suppress history: {suppress_history})"
        )

        lookup = CIKLookup(
            self.client.get_bulk_ticker_table,
            store=self.store,
            cache_duration=timedelta(hours=settings.ticker_cache_ttl_hours),
        )
        targets = resolve_targets(
            settings.tickers,
            settings.ciks,
            lookup=lookup if settings.tickers else None,
            max_companies=settings.max_companies,
        )
        if not targets:
            logger.warning("No targets resolved. Exiting.")
            self.store.set_value("REPORT.json", {"runStartedAt": run_started_at, "message": NO_TARGETS_MESSAGE})
            return RunResult(run_started_at, first_run, message=NO_TARGETS_MESSAGE)
        logger.info(f"Resolved {len(targets)} filer(s)")

        classifier = ChangeClassifier(
            self.client,
            state,
            parse_sections=settings.parse_sections,
            max_section_chars=settings.max_section_chars,
        )
        poller = SubmissionPoller(
            self.client,
            classifier,
            forms=settings.forms,
            start_date=start,
            end_date=end,
            max_filings_per_company=settings.max_filings_per_company,
            max_workers=settings.request_concurrency,
            show_progress=self.show_progress,
        )
        detected = poller.poll(targets)

        baseline: List[ChangeRecord] = []
        if suppress_history:
            detected, baseline = split_history(detected, started.date())
            logger.info(f"First run: {len(baseline)} historical filing(s) recorded without being reported")
            if len(baseline) > settings.max_state_keys:
                logger.warning(
                    f"History baseline of {len(baseline)} filings exceeds MAX_STATE_KEYS={settings.max_state_keys}; "
                    f"pruned filings will be reported as new on the next run"
                )

        changes = AmendmentResolver(self.client).resolve_all(detected)
        rows = [self._enrich(change, run_started_at) for change in changes]

        report = build_report(
            rows,
            run_started_at=run_started_at,
            first_run=first_run,
            backfill=settings.backfill,
            suppress_history=suppress_history,
            start_date=start.isoformat() if start else None,
            end_date=end.isoformat() if end else None,
        )
        self._write_outputs(rows, report)

        finished_at = format_utc(self.clock())
        tracker.record_changes(baseline, finished_at)
        tracker.record_changes(changes, finished_at)
        tracker.prune(settings.max_state_keys)
        tracker.complete_run(finished_at)

        logger.info(f"Done. Detected {len(rows)} change(s). Report saved to REPORT.json / REPORT.md.")
        return RunResult(run_started_at, first_run, targets=len(targets), rows=rows, report=report)
