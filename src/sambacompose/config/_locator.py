"""設定ファイル探索。

.sambacompose/ ディレクトリと pyproject.toml をカレントから親方向に探索する。
"""

from __future__ import annotations

import stat as stat_module
from collections.abc import Callable
from pathlib import Path

_PROJECT_DIR_NAME: str = ".sambacompose"
_CONFIG_FILE_NAME: str = "config.toml"
_PYPROJECT_FILE_NAME: str = "pyproject.toml"


def _find_ancestor(
    start: Path,
    target_name: str,
    check: Callable[[int], bool],
) -> Path | None:
    """start から親方向に target_name を探索し、最初にマッチした候補パスを返す。

    Args:
        start: 探索開始ディレクトリ。
        target_name: 探索対象の名前。
        check: stat.st_mode に適用する種別チェック関数（例: stat.S_ISDIR）。

    Raises:
        OSError: 探索パス上のアクセス権限エラー等。
    """
    current = start.resolve()
    while True:
        candidate = current / target_name
        try:
            st = candidate.stat()
        except FileNotFoundError:
            pass
        else:
            if check(st.st_mode):
                return candidate
        if current.parent == current:
            return None
        current = current.parent


def find_project_root(start: Path) -> Path | None:
    """start から親方向に .sambacompose/ を探索し、それを含むディレクトリを返す。"""
    result = _find_ancestor(start, _PROJECT_DIR_NAME, stat_module.S_ISDIR)
    return result.parent if result is not None else None


def find_config_file(start: Path) -> Path | None:
    """プロジェクトの config.toml のパスを返す。

    存在チェックは行わない（パスのみ構築）。プロジェクトルートが
    見つからなければ None。
    """
    project_root = find_project_root(start)
    if project_root is None:
        return None
    return project_root / _PROJECT_DIR_NAME / _CONFIG_FILE_NAME


def find_pyproject_toml(start: Path) -> Path | None:
    """start から親方向に pyproject.toml を探索する。"""
    return _find_ancestor(start, _PYPROJECT_FILE_NAME, stat_module.S_ISREG)


def get_user_config_path() -> Path:
    """~/.config/sambacompose/config.toml を返す（存在チェックは行わない）。

    Raises:
        RuntimeError: ホームディレクトリを特定できない場合。
    """
    return Path.home() / ".config" / "sambacompose" / _CONFIG_FILE_NAME
