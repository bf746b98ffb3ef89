"""
Fault taxonomy and a small result type for fallible fetches.

TransportFault and ParseFault are recoverable: the pipeline degrades the
affected candidate or target and keeps going. ConfigurationFault aborts the
run before any network activity.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class ChangeFeedError(Exception):
    """Base class for change-feed errors."""


class ConfigurationFault(ChangeFeedError):
    """Missing or invalid configuration (e.g. no SEC user agent)."""


class TransportFault(ChangeFeedError):
    """Non-success status, timeout or connection failure from a fetch."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseFault(ChangeFeedError):
    """Malformed response body."""


RECOVERABLE_FAULTS = (TransportFault, ParseFault)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or the recoverable fault that prevented it."""

    value: Optional[T] = None
    fault: Optional[ChangeFeedError] = None

    @property
    def ok(self) -> bool:
        return self.fault is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, fault: ChangeFeedError) -> "Result[T]":
        return cls(fault=fault)

    @classmethod
    def attempt(cls, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Result[T]":
        """Run fn, capturing transport and parse faults. Other errors propagate."""
        try:
            return cls.success(fn(*args, **kwargs))
        except RECOVERABLE_FAULTS as e:
            return cls.failure(e)
