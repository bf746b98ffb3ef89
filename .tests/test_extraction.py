"""
Tests for core/extraction.py - HTML to text and section extraction.
"""

import re
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))


class TestHtmlToText:
    """Tests for html_to_text."""

    def test_strips_scripts_and_styles(self, sample_filing_html):
        """Test script and style bodies never reach the text."""
        from core.extraction import html_to_text
        text = html_to_text(sample_filing_html)

        assert 'console.log' not in text
        assert 'color: red' not in text
        assert '<' not in text

    def test_keeps_visible_text(self, sample_filing_html):
        from core.extraction import html_to_text
        text = html_to_text(sample_filing_html)

        assert 'Item 1A. Risk Factors' in text
        assert 'Revenue' in text

    def test_normalizes_nbsp_and_whitespace(self):
        from core.extraction import html_to_text
        text = html_to_text('<p>$394.3&nbsp;billion</p>\n\n\n<p>  next   line </p>')

        assert '\u00a0' not in text
        assert '$394.3 billion' in text
        assert '  ' not in text
        assert '\n\n' not in text

    def test_empty_input(self):
        from core.extraction import html_to_text
        assert html_to_text('') == ''
        assert html_to_text(None) == ''


class TestExtractSection:
    """Tests for extract_section window rules."""

    START = [re.compile(r'\bstart here\b', re.IGNORECASE)]
    END = [re.compile(r'\bstop here\b', re.IGNORECASE)]

    def test_no_start_pattern_yields_empty(self):
        from core.extraction import extract_section
        assert extract_section('nothing relevant', self.START, self.END) == ''

    def test_empty_text_yields_empty(self):
        from core.extraction import extract_section
        assert extract_section('', self.START, self.END) == ''

    def test_start_without_end_runs_to_end_of_text(self):
        from core.extraction import extract_section
        text = 'preamble START HERE body of the section'
        assert extract_section(text, self.START, self.END) == 'START HERE body of the section'

    def test_start_without_end_is_capped(self):
        """Test a section running to end of text is cut at the character cap."""
        from core.extraction import extract_section
        text = 'Start here ' + 'x' * 500
        section = extract_section(text, self.START, self.END, max_chars=50)
        assert len(section) == 50
        assert section.startswith('Start here')

    def test_stops_at_end_pattern(self):
        from core.extraction import extract_section
        text = 'start here keep this stop here drop this'
        assert extract_section(text, self.START, self.END) == 'start here keep this'

    def test_earliest_start_pattern_wins(self):
        from core.extraction import extract_section
        starts = [re.compile('beta'), re.compile('alpha')]
        assert extract_section('alpha one beta two', starts, self.END) == 'alpha one beta two'


class TestExtractKeySections:
    """Tests for the named 10-K sections."""

    def test_risk_factors_window(self, sample_filing_text):
        from core.extraction import extract_key_sections
        sections = extract_key_sections(sample_filing_text)

        assert sections.risk_factors.startswith('Item 1A. Risk Factors')
        assert 'supply chain concentration' in sections.risk_factors
        assert 'Unresolved Staff Comments' not in sections.risk_factors

    def test_financial_statements_window(self, sample_filing_text):
        from core.extraction import extract_key_sections
        sections = extract_key_sections(sample_filing_text)

        assert sections.financial_statements.startswith('Item 8. Financial Statements')
        assert '$394.3 billion' in sections.financial_statements
        assert 'Item 9' not in sections.financial_statements

    def test_from_html(self, sample_filing_html):
        from core.extraction import extract_key_sections, html_to_text
        sections = extract_key_sections(html_to_text(sample_filing_html))

        assert 'market competition' in sections.risk_factors
        assert 'Net Income' in sections.financial_statements

    def test_document_without_sections(self):
        from core.extraction import extract_key_sections
        sections = extract_key_sections('Item 2.02 Results of Operations. Press release attached.')

        assert sections.risk_factors == ''
        assert sections.financial_statements == ''

    def test_character_cap_applies_to_both(self, sample_filing_text):
        from core.extraction import extract_key_sections
        sections = extract_key_sections(sample_filing_text, max_chars=10)

        assert len(sections.risk_factors) <= 10
        assert len(sections.financial_statements) <= 10
