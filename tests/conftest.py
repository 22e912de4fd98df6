"""Shared pytest fixtures."""

from __future__ import annotations

import logging

import pytest

from proofline.utils.logging import reset_logging


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Undo handlers installed by ``setup_logging`` so tests stay isolated."""

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    reset_logging()
