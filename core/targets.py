"""
Watch-target resolution: tickers and explicit CIKs to a deduplicated list of filers.
"""
import logging
from typing import Iterable, List, Optional

from schemas.filings import FilerTarget
from utils.identifiers import normalize_cik

logger = logging.getLogger(__name__)


def resolve_targets(
    tickers: Iterable[str],
    ciks: Iterable[str],
    lookup=None,
    max_companies: int = 200,
) -> List[FilerTarget]:
    """
    Resolve the watch list.

    Tickers go through the cached bulk table in `lookup` (a CIKLookup);
    explicit CIKs bypass it. Results are deduplicated by CIK, first
    occurrence wins, and truncated to `max_companies`. Unknown tickers and
    malformed CIKs are dropped.

    Raises:
        TransportFault/ParseFault: If the ticker table cannot be fetched
            while tickers were requested
    """
    tickers = [str(t).strip().upper() for t in tickers or [] if str(t).strip()]
    ciks = [str(c).strip() for c in ciks or [] if str(c).strip()]

    if tickers and lookup is None:
        raise ValueError("A ticker lookup is required to resolve tickers")

    candidates: List[FilerTarget] = []
    for ticker in tickers:
        cik = lookup.get_cik(ticker)
        if cik:
            candidates.append(FilerTarget(cik=cik, ticker=ticker))
        else:
            logger.debug(f"Ticker {ticker} not found in SEC ticker table")

    for raw in ciks:
        try:
            candidates.append(FilerTarget(cik=normalize_cik(raw)))
        except ValueError as e:
            logger.warning(f"Skipping watch target: {e}")

    resolved: List[FilerTarget] = []
    seen = set()
    for target in candidates:
        if len(resolved) >= max_companies:
            break
        if target.cik in seen:
            continue
        seen.add(target.cik)
        resolved.append(target)
    return resolved
