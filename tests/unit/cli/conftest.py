"""CLI テスト共通フィクスチャ。"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """カレントディレクトリとホームディレクトリを tmp_path 配下に隔離する。"""
    home = tmp_path / "home"
    home.mkdir()
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    with patch("sambacompose.config._locator.Path.home", return_value=home):
        yield project
