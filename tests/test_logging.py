"""Tests for the logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from proofline.services import Settings
from proofline.utils import logging as logging_utils


def _flush() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_setup_logging_creates_rotating_file(tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"

    log_path = logging_utils.setup_logging(level=logging.INFO, log_dir=log_dir, console=False, force=True)

    logger = logging_utils.get_logger("proofline.tests")
    logger.info("Logging smoke test")
    _flush()

    assert log_path == log_dir / "proofline.log"
    assert logging_utils.get_log_path() == log_path
    assert "Logging smoke test" in log_path.read_text(encoding="utf-8")
    assert logging.getLogger("httpx").level == logging.WARNING


def test_log_dir_environment_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROOFLINE_LOG_DIR", str(tmp_path / "env-logs"))

    log_path = logging_utils.setup_logging(console=False, force=True)

    assert log_path.parent == tmp_path / "env-logs"


def test_configure_from_settings_uses_debug_flag(tmp_path: Path) -> None:
    logging_utils.configure_from_settings(
        Settings(debug_logging=True),
        log_dir=tmp_path,
        console=False,
        force=True,
    )

    logging_utils.get_logger("proofline.debug").debug("verbose detail")
    _flush()

    assert logging.getLogger().level == logging.DEBUG
    assert "verbose detail" in (tmp_path / "proofline.log").read_text(encoding="utf-8")


def test_setup_is_idempotent_without_force(tmp_path: Path) -> None:
    first = logging_utils.setup_logging(log_dir=tmp_path / "one", console=False, force=True)

    second = logging_utils.setup_logging(log_dir=tmp_path / "two", console=False)

    assert second == first


@pytest.mark.parametrize(("env_value", "expected"), [("warning", logging.WARNING), ("loud", logging.INFO)])
def test_level_environment_override(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    env_value: str,
    expected: int,
) -> None:
    monkeypatch.setenv("PROOFLINE_LOG_LEVEL", env_value)

    logging_utils.setup_logging(log_dir=tmp_path, console=False, force=True)

    assert logging.getLogger().level == expected


def test_reset_allows_reconfiguration(tmp_path: Path) -> None:
    logging_utils.setup_logging(log_dir=tmp_path / "one", console=False, force=True)

    logging_utils.reset_logging()
    assert logging_utils.get_log_path() is None

    second = logging_utils.setup_logging(log_dir=tmp_path / "two", console=False)
    assert second == tmp_path / "two" / "proofline.log"
