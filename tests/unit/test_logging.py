"""Unit tests for ticketsync logging configuration."""

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from ticketsync.logging import sanitize_for_log, setup_logging, truncate_output


@pytest.fixture(autouse=True)
def _reset_logger():
    """Drop handlers added by a test so log files can be removed."""
    yield
    logger = logging.getLogger("ticketsync")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_creates_log_directory(self, tmp_path: Path) -> None:
        """Nested log directory is created."""
        log_dir = tmp_path / "nested" / "logs"
        setup_logging(log_dir=log_dir, console=False)

        assert log_dir.exists()

    def test_component_loggers_write_to_file(self, tmp_path: Path) -> None:
        """Child loggers end up in the shared log file with their name."""
        setup_logging(log_dir=tmp_path, console=False)

        logging.getLogger("ticketsync.reconcile").info("reconcile log")
        logging.getLogger("ticketsync.generator").info("generator log")

        content = (tmp_path / "ticketsync.log").read_text()
        assert "reconcile log" in content
        assert "generator log" in content
        assert " | INFO     | ticketsync.reconcile | " in content

    def test_log_level_configurable(self, tmp_path: Path) -> None:
        """Messages below the level are dropped."""
        setup_logging(log_dir=tmp_path, level="WARNING", console=False)
        logger = logging.getLogger("ticketsync")
        logger.info("should not appear")
        logger.warning("should appear")

        content = (tmp_path / "ticketsync.log").read_text()
        assert "should not appear" not in content
        assert "should appear" in content

    @patch.dict(os.environ, {"TICKETSYNC_LOG_LEVEL": "DEBUG"})
    def test_log_level_from_env(self, tmp_path: Path) -> None:
        """Level can come from the environment."""
        logger = setup_logging(log_dir=tmp_path, console=False)

        assert logger.level == logging.DEBUG

    def test_log_dir_from_env(self, tmp_path: Path) -> None:
        """Directory can come from the environment."""
        with patch.dict(os.environ, {"TICKETSYNC_LOG_DIR": str(tmp_path)}):
            setup_logging(console=False)

        assert (tmp_path / "ticketsync.log").exists()

    def test_no_duplicate_handlers_on_repeated_setup(self, tmp_path: Path) -> None:
        """Repeated setup replaces handlers instead of stacking them."""
        setup_logging(log_dir=tmp_path, console=False)
        logger = setup_logging(log_dir=tmp_path, console=True)

        assert len(logger.handlers) == 2


@pytest.mark.unit
class TestSanitizeForLog:
    """Tests for sanitize_for_log."""

    def test_redacts_github_token(self) -> None:
        token = "ghp_" + "a" * 36
        assert sanitize_for_log(f"auth failed for {token}") == "auth failed for [GITHUB_TOKEN]"

    def test_redacts_bearer_and_basic(self) -> None:
        text = "Authorization: Bearer abc.def Authorization: Basic Ym90OnNlY3JldA=="
        result = sanitize_for_log(text)

        assert "abc.def" not in result
        assert "Ym90OnNlY3JldA==" not in result

    def test_redacts_session_cookie_and_password(self) -> None:
        text = 'JSESSIONID=ABC123; body {"username": "bot", "password": "hunter2"}'
        result = sanitize_for_log(text)

        assert "ABC123" not in result
        assert "hunter2" not in result
        assert '"username": "bot"' in result

    def test_plain_text_unchanged(self) -> None:
        assert sanitize_for_log("nothing secret here") == "nothing secret here"


@pytest.mark.unit
class TestTruncateOutput:
    """Tests for truncate_output."""

    def test_short_output_unchanged(self) -> None:
        assert truncate_output("short", max_length=10) == "short"

    def test_long_output_truncated(self) -> None:
        result = truncate_output("x" * 30, max_length=10)

        assert result.startswith("x" * 10)
        assert "20 more chars" in result
