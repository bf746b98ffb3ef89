"""
Detection state: which filings have been seen and their last fingerprints.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from schemas.filings import ChangeRecord

logger = logging.getLogger(__name__)

STATE_KEY = "STATE.json"
DEFAULT_MAX_STATE_KEYS = 20000


@dataclass
class DetectionState:
    """
    Persisted across runs. Keys are '<cik10>:<accession>'; every key in
    `fingerprints` is also in `seen` because both are written together.
    """
    last_successful_run_at: Optional[str] = None
    seen: Dict[str, str] = field(default_factory=dict)
    fingerprints: Dict[str, str] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def first_run(self) -> bool:
        return not self.last_successful_run_at

    def mark(self, key: str, fingerprint: Optional[str], seen_at: str) -> None:
        """Insert first-seen (existing timestamps are kept) and store the fingerprint."""
        with self._lock:
            self.seen.setdefault(key, seen_at)
            if fingerprint:
                self.fingerprints[key] = fingerprint

    def prune(self, max_keys: int) -> list:
        """
        Evict the oldest-first-seen keys until at most `max_keys` remain.

        Returns:
            The evicted keys
        """
        with self._lock:
            excess = len(self.seen) - max_keys
            if excess <= 0:
                return []
            oldest = sorted(self.seen.items(), key=lambda kv: str(kv[1]))[:excess]
            removed = [key for key, _ in oldest]
            for key in removed:
                self.seen.pop(key, None)
                self.fingerprints.pop(key, None)
            return removed

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "lastSuccessfulRunAt": self.last_successful_run_at,
                "seen": dict(self.seen),
                "fingerprints": dict(self.fingerprints),
            }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "DetectionState":
        data = data or {}
        return cls(
            last_successful_run_at=data.get("lastSuccessfulRunAt"),
            seen=dict(data.get("seen") or {}),
            fingerprints={k: v for k, v in (data.get("fingerprints") or {}).items() if v},
        )


class FilingTracker:
    """Loads and saves DetectionState through a key/value store."""

    def __init__(self, store, state_key: str = STATE_KEY):
        self.store = store
        self.state_key = state_key
        self.state = self.load_state()

    def load_state(self) -> DetectionState:
        """Load tracking state from the store (empty state when absent)."""
        return DetectionState.from_dict(self.store.get_value(self.state_key))

    def save_state(self) -> None:
        """Persist the whole state in one write."""
        self.store.set_value(self.state_key, self.state.to_dict())

    def record_changes(self, changes: Iterable[ChangeRecord], seen_at: str) -> None:
        """Mark emitted changes as seen and store their fingerprints."""
        for change in changes:
            self.state.mark(change.key, change.fingerprint, seen_at)

    def prune(self, max_keys: int = DEFAULT_MAX_STATE_KEYS) -> int:
        removed = self.state.prune(max_keys)
        if removed:
            logger.info(f"Pruned {len(removed)} oldest state keys (budget {max_keys})")
        return len(removed)

    def complete_run(self, finished_at: str) -> None:
        """Stamp the run as successful and persist."""
        self.state.last_successful_run_at = finished_at
        self.save_state()
