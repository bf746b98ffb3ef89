#!/usr/bin/env python3
"""
CIK Lookup Module
Maps ticker symbols to CIK numbers using SEC's bulk company tickers table
"""

import logging
import threading
import time
from datetime import timedelta
from typing import Callable, Dict, Optional

from utils.identifiers import normalize_cik

logger = logging.getLogger(__name__)


class CIKLookup:
    """
    Handles ticker to CIK conversion.

    The whole table is fetched at once and cached for CACHE_DURATION, in
    memory and (when a store is given) in the key/value store under
    CACHE_KEY. A miss or a stale cache triggers one refetch of the table,
    never a per-ticker request. Concurrent callers share a single refresh.
    """

    CACHE_KEY = "TICKER_CIK_MAP"
    CACHE_DURATION = timedelta(hours=24)

    def __init__(
        self,
        fetch_table: Callable[[], Dict[str, str]],
        store=None,
        cache_duration: Optional[timedelta] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.fetch_table = fetch_table
        self.store = store
        self.cache_duration = cache_duration or self.CACHE_DURATION
        self.clock = clock
        self.fetched_at: Optional[float] = None
        self.tickers_data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def _is_fresh(self, fetched_at: Optional[float]) -> bool:
        if fetched_at is None:
            return False
        return (self.clock() - fetched_at) < self.cache_duration.total_seconds()

    def _load_tickers(self) -> Dict[str, str]:
        """Return the ticker table from memory, the store, or SEC (in that order)."""
        with self._lock:
            if self._is_fresh(self.fetched_at):
                return self.tickers_data

            if self.store is not None:
                cached = self.store.get_value(self.CACHE_KEY) or {}
                if cached.get("map") and self._is_fresh(cached.get("fetchedAt")):
                    self.tickers_data = cached["map"]
                    self.fetched_at = cached["fetchedAt"]
                    return self.tickers_data

            logger.info("Fetching company tickers from SEC...")
            table = self.fetch_table()
            now = self.clock()
            self.tickers_data = {str(t).upper(): str(c) for t, c in table.items()}
            self.fetched_at = now

            if self.store is not None:
                self.store.set_value(self.CACHE_KEY, {"fetchedAt": now, "map": self.tickers_data})
            return self.tickers_data

    def get_cik(self, ticker: str) -> Optional[str]:
        """Get the 10 digit CIK for a ticker symbol, or None when unknown."""
        raw = self._load_tickers().get(ticker.strip().upper())
        if raw is None:
            return None
        try:
            return normalize_cik(raw)
        except ValueError:
            logger.warning(f"Ignoring malformed CIK {raw!r} for ticker {ticker}")
            return None
