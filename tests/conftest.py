"""Shared pytest fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in list(os.environ):
        if name.startswith("NOTEFLOW_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NOTEFLOW_LOG_DIR", str(tmp_path / "logs"))
