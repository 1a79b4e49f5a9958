"""Shared fixtures: keep session logs out of the user's home directory."""

import logging

import pytest

import config


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("PLOTLY_LIVE_DIR", str(tmp_path / "plotly-live"))
    config._reset_data_dir()
    yield
    logger = logging.getLogger("plotly-live")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    config._reset_data_dir()
