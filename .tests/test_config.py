"""
Tests for utils/config.py - Environment-based settings.
"""

import pytest
from datetime import date
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def isolated(clean_env, temp_dir, monkeypatch):
    """Run with no .env file and no change-feed variables set."""
    monkeypatch.chdir(temp_dir)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, isolated):
        from utils.config import Settings
        settings = Settings()

        assert settings.sec_user_agent is None
        assert settings.forms == ['10-K', '10-Q', '8-K']
        assert settings.tickers == []
        assert settings.parse_sections is True
        assert settings.max_section_chars == 12000
        assert settings.max_companies == 200
        assert settings.max_filings_per_company == 200
        assert settings.request_concurrency == 4
        assert settings.max_state_keys == 20000
        assert settings.output_formats == ['json']

    def test_comma_lists_from_env(self, isolated, monkeypatch):
        from utils.config import Settings
        monkeypatch.setenv('TICKERS', 'aapl, msft,,')
        monkeypatch.setenv('FORMS', '10-K,13D')
        monkeypatch.setenv('CIKS', '320193')

        settings = Settings()

        assert settings.tickers == ['aapl', 'msft']
        assert settings.forms == ['10-K', '13D']
        assert settings.ciks == ['320193']

    def test_scalars_from_env(self, isolated, monkeypatch):
        from utils.config import Settings
        monkeypatch.setenv('SEC_USER_AGENT', 'Test User test@example.com')
        monkeypatch.setenv('BACKFILL', 'true')
        monkeypatch.setenv('REQUEST_CONCURRENCY', '8')

        settings = Settings()

        assert settings.sec_user_agent == 'Test User test@example.com'
        assert settings.backfill is True
        assert settings.request_concurrency == 8

    def test_env_file_loaded(self, isolated, temp_dir):
        from utils.config import Settings
        (temp_dir / '.env').write_text('SEC_USER_AGENT=Env File env@example.com\nMAX_COMPANIES=5\n')

        settings = Settings()

        assert settings.sec_user_agent == 'Env File env@example.com'
        assert settings.max_companies == 5

    def test_constructor_accepts_comma_string(self, isolated):
        from utils.config import Settings
        assert Settings(tickers='AAPL,NVDA').tickers == ['AAPL', 'NVDA']


class TestValidation:
    """Tests for date_window and validate_for_run."""

    def test_date_window(self, isolated):
        from utils.config import Settings
        settings = Settings(start_date='2024-01-01', end_date='2024-01-31')

        assert settings.date_window() == (date(2024, 1, 1), date(2024, 1, 31))

    def test_open_date_window(self, isolated):
        from utils.config import Settings
        assert Settings().date_window() == (None, None)

    def test_bad_date_is_configuration_fault(self, isolated):
        from utils.config import Settings
        from core.faults import ConfigurationFault

        with pytest.raises(ConfigurationFault, match='START_DATE'):
            Settings(start_date='01/01/2024').date_window()

    def test_missing_user_agent(self, isolated):
        """Test a run without a contact string fails before any fetch."""
        from utils.config import Settings
        from core.faults import ConfigurationFault

        with pytest.raises(ConfigurationFault, match='SEC_USER_AGENT'):
            Settings().validate_for_run()

    def test_bad_concurrency(self, isolated):
        from utils.config import Settings
        from core.faults import ConfigurationFault

        with pytest.raises(ConfigurationFault):
            Settings(sec_user_agent='x x@example.com', request_concurrency=0).validate_for_run()

    def test_valid_settings_pass(self, isolated):
        from utils.config import Settings
        Settings(sec_user_agent='Test User test@example.com').validate_for_run()

    def test_get_settings_cached(self, isolated):
        from utils.config import get_settings
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
