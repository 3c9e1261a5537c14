"""Tests for the command line entrypoint."""

import json
from collections.abc import Iterator
from unittest.mock import AsyncMock, patch

import pytest

from roboscan.crawler.bot_access import BotAccessResult
from roboscan.crawler.errors import classify_fetch_error
from roboscan.exceptions import ScanError
from roboscan.main import build_parser, main
from tests.fixtures import make_snapshot


class TestParser:
    """Tests for argument parsing."""

    def test_scan_command(self) -> None:
        """Test scan arguments."""
        args = build_parser().parse_args(["scan", "example.com", "--json"])
        assert args.command == "scan"
        assert args.url == "example.com"
        assert args.json is True

    def test_test_bot_command(self) -> None:
        """Test test-bot arguments."""
        args = build_parser().parse_args(["test-bot", "example.com", "GPTBot"])
        assert args.command == "test-bot"
        assert args.bot == "GPTBot"

    def test_command_required(self) -> None:
        """Test a subcommand must be given."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMain:
    """Tests for main()."""

    @pytest.fixture(autouse=True)
    def no_logging_setup(self) -> Iterator[None]:
        with patch("roboscan.main.setup_logging"):
            yield

    def test_scan_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test --json prints the snapshot."""
        snapshot = make_snapshot(robots_txt="User-agent: *\nDisallow: /\n")
        capsys.readouterr()  # Drop log output from building the snapshot
        with patch("roboscan.main.scan", AsyncMock(return_value=snapshot)):
            exit_code = main(["scan", "example.com", "--json"])

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["robots_txt_found"] is True
        assert data["bot_permissions"]["GPTBot"] == "Blocked"

    def test_scan_text(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test the human-readable report."""
        snapshot = make_snapshot(warnings=("robots.txt found but missing sitemap reference",))
        capsys.readouterr()
        with patch("roboscan.main.scan", AsyncMock(return_value=snapshot)):
            exit_code = main(["scan", "example.com"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "AUDIT: https://example.com" in out
        assert "missing sitemap reference" in out
        assert "OpenAI: Training data collection" in out

    def test_scan_failure(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test an unreachable site exits non-zero with the message."""
        error = ScanError("https://example.com", classify_fetch_error(TimeoutError()))
        with patch("roboscan.main.scan", AsyncMock(side_effect=error)):
            exit_code = main(["scan", "example.com"])

        assert exit_code == 2
        assert "Connection timeout" in capsys.readouterr().err

    def test_test_bot(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test the bot probe output and exit code."""
        result = BotAccessResult(
            bot_name="GPTBot",
            url="https://example.com",
            status=403,
            accessible=False,
            status_text="Forbidden",
        )
        with patch("roboscan.main.probe_bot_access", AsyncMock(return_value=result)):
            exit_code = main(["test-bot", "example.com", "GPTBot"])

        assert exit_code == 1
        assert json.loads(capsys.readouterr().out)["status"] == 403
