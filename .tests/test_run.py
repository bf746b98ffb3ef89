"""
Tests for run.py - CLI entry point.
"""

import pytest
from pathlib import Path
from unittest.mock import patch, MagicMock
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def settings(clean_env, temp_dir, monkeypatch):
    from utils.config import Settings
    monkeypatch.chdir(temp_dir)
    return Settings(sec_user_agent='Test User test@example.com', output_dir=str(temp_dir))


class TestCommandMapping:
    """Tests for command mapping in run.py."""

    def test_commands_defined(self):
        from run import commands
        assert set(commands) == {'run', 'status', 'lookup'}

    def test_no_command_prints_usage(self, capsys):
        from run import main
        assert main([]) == 0
        out = capsys.readouterr().out
        for cmd in ('run', 'status', 'lookup'):
            assert f'python run.py {cmd}' in out


class TestSettingsOverrides:
    """Tests for CLI flags overriding settings."""

    def test_run_flags(self):
        from run import build_parser, settings_overrides
        args = build_parser().parse_args([
            'run', '--tickers', 'AAPL, MSFT', '--forms', '10-K', '--start-date', '2025-01-01',
            '--no-sections', '--no-ai', '--csv',
        ])
        overrides = settings_overrides(args)

        assert overrides == {
            'tickers': ['AAPL', 'MSFT'],
            'forms': ['10-K'],
            'start_date': '2025-01-01',
            'parse_sections': False,
            'ai_summarize': False,
            'output_formats': ['json', 'csv'],
        }

    def test_no_flags_no_overrides(self):
        from run import build_parser, settings_overrides
        assert settings_overrides(build_parser().parse_args(['run'])) == {}


class TestCommands:
    """Tests for command handlers."""

    def test_run_command(self, settings, capsys):
        from run import main
        result = MagicMock(message=None, targets=1, changes_detected=1,
                           rows=[{'changeType': 'new', 'ticker': 'AAPL', 'cik': '0000320193',
                                  'formType': '10-K', 'filingDate': '2025-01-10', 'accessionNumber': 'acc-1'}],
                           report={'totals': {'byType': {'new': 1, 'amendment': 0, 'update': 0}}})

        with patch('utils.config.get_settings', return_value=settings), \
             patch('core.pipeline.ChangeFeedPipeline') as pipeline_cls:
            pipeline_cls.return_value.run.return_value = result
            assert main(['run', '--ciks', '320193']) == 0

        passed_settings = pipeline_cls.call_args[0][0]
        assert passed_settings.ciks == ['320193']
        assert 'acc-1' in capsys.readouterr().out

    def test_run_configuration_error(self, settings, capsys):
        from run import main
        bad = settings.model_copy(update={'sec_user_agent': ''})

        with patch('utils.config.get_settings', return_value=bad):
            assert main(['run', '--ciks', '320193']) == 1

        assert 'SEC_USER_AGENT' in capsys.readouterr().out

    def test_lookup_command(self, settings, capsys):
        from run import main
        with patch('utils.config.get_settings', return_value=settings), \
             patch('services.edgar_client.EdgarClient') as client_cls:
            client_cls.return_value.get_bulk_ticker_table.return_value = {'AAPL': '320193'}
            assert main(['lookup', 'aapl', 'zzzz']) == 0

        out = capsys.readouterr().out
        assert 'AAPL: CIK 0000320193' in out
        assert 'ZZZZ: not found' in out

    def test_status_command(self, settings, capsys):
        from run import main
        with patch('utils.config.get_settings', return_value=settings):
            assert main(['status']) == 0

        assert 'No detection state found' in capsys.readouterr().out
