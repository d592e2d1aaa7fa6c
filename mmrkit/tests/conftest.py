"""Shared pytest fixtures for mmrkit tests."""

from __future__ import annotations

import logging
import os

import pytest

from mmrkit.config import reset_config
from mmrkit.observability import ROOT_LOGGER


@pytest.fixture(autouse=True)
def _isolate_global_state(monkeypatch):
    """Drop MMRKIT_* env vars, cached config and installed log handlers."""
    for key in [k for k in os.environ if k.startswith("MMRKIT_")]:
        monkeypatch.delenv(key, raising=False)
    reset_config()

    yield

    reset_config()
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
