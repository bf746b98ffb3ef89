"""
Section extraction from filing documents.

HTML documents are reduced to plain text, then each named section is cut out
with a start/end pattern window. This is a best-effort heuristic: the window
starts at the earliest start-pattern hit and stops at the earliest end-pattern
hit after it (or the end of the document), so boundaries are approximate.
"""

import re
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Optional, Pattern, Sequence

from schemas.filings import ExtractedSections

DEFAULT_MAX_SECTION_CHARS = 12000


class _HTMLTextExtractor(HTMLParser):
    _skip_tags = {"script", "style", "noscript"}
    _block_tags = {"br", "p", "div", "tr", "li", "table", "h1", "h2", "h3", "h4", "h5", "h6"}

    def __init__(self) -> None:
        super().__init__()
        self._chunks: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):  # noqa: ANN001
        if tag in self._skip_tags:
            self._skip_depth += 1
        elif tag in self._block_tags:
            self._chunks.append("\n")
        elif tag == "td":
            self._chunks.append(" ")

    def handle_endtag(self, tag):  # noqa: ANN001
        if tag in self._skip_tags:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in self._block_tags:
            self._chunks.append("\n")

    def handle_data(self, data):  # noqa: ANN001
        if not self._skip_depth:
            self._chunks.append(data)

    def get_text(self) -> str:
        return "".join(self._chunks)


def html_to_text(html_content: str) -> str:
    """Strip tags, scripts and styles; normalize nbsp and collapse whitespace."""
    parser = _HTMLTextExtractor()
    parser.feed(html_content or "")
    parser.close()
    text = parser.get_text().replace("\u00a0", " ")
    text = re.sub(r"[ \t\r\f\v]+", " ", text)
    text = re.sub(r" ?\n[\s]*", "\n", text)
    return text.strip()


@dataclass(frozen=True)
class SectionSpec:
    """Start and end matchers for one named section."""
    name: str
    start_patterns: Sequence[Pattern]
    end_patterns: Sequence[Pattern]


def _compile(*patterns: str) -> tuple:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


# Item 1A in a 10-K, Part II Item 1A in a 10-Q
RISK_FACTORS = SectionSpec(
    name="risk_factors",
    start_patterns=_compile(
        r"\bitem\s+1a\.?\s+risk\s+factors\b",
        r"\brisk\s+factors\b",
    ),
    end_patterns=_compile(
        r"\bitem\s+1b\b",
        r"\bitem\s+2\b",
        r"\bpart\s+ii\b",
    ),
)

# Item 8 in a 10-K, Part I Item 1 in a 10-Q
FINANCIAL_STATEMENTS = SectionSpec(
    name="financial_statements",
    start_patterns=_compile(
        r"\bitem\s+8\.?\s+financial\s+statements\b",
        r"\bitem\s+1\.?\s+financial\s+statements\b",
        r"\bfinancial\s+statements\s+and\s+supplementary\s+data\b",
        r"\bconsolidated\s+financial\s+statements\b",
    ),
    end_patterns=_compile(
        r"\bitem\s+9\b",
        r"\bitem\s+2\b",
        r"\bitem\s+3\b",
        r"\bmanagement'?s\s+discussion\b",
    ),
)


def _earliest(patterns: Sequence[Pattern], text: str, pos: int = 0) -> Optional[int]:
    hits = [m.start() for m in (p.search(text, pos) for p in patterns) if m]
    return min(hits) if hits else None


def extract_section(
    text: str,
    start_patterns: Sequence[Pattern],
    end_patterns: Sequence[Pattern],
    max_chars: int = DEFAULT_MAX_SECTION_CHARS,
) -> str:
    """
    Cut a section out of plain text.

    Args:
        text: Document text (already reduced from HTML)
        start_patterns: Case-insensitive matchers; the earliest hit starts the section
        end_patterns: Case-insensitive matchers; the earliest hit strictly after
            the start ends it, otherwise the section runs to the end of the text
        max_chars: Character budget for the returned section

    Returns:
        The trimmed section text, or "" when no start pattern matches
    """
    if not text:
        return ""

    start = _earliest(start_patterns, text)
    if start is None:
        return ""

    end = _earliest(end_patterns, text, start + 1)
    window = text[start:end] if end is not None else text[start:]
    return window[:max_chars].strip()


def extract_key_sections(text: str, max_chars: int = DEFAULT_MAX_SECTION_CHARS) -> ExtractedSections:
    """Extract the risk factors and financial statements sections."""
    return ExtractedSections(
        risk_factors=extract_section(
            text, RISK_FACTORS.start_patterns, RISK_FACTORS.end_patterns, max_chars
        ),
        financial_statements=extract_section(
            text, FINANCIAL_STATEMENTS.start_patterns, FINANCIAL_STATEMENTS.end_patterns, max_chars
        ),
    )
