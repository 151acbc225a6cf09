"""TOML 設定ファイルローダー。

パースのみを担当し、バリデーションは _resolver.py が行う。
"""

from __future__ import annotations

import tomllib
from pathlib import Path

_TOOL_SECTION_KEY: str = "tool"
_SAMBACOMPOSE_SECTION_KEY: str = "sambacompose"


def load_toml_config(path: Path) -> dict[str, object]:
    """TOML 設定ファイルを読み込み辞書として返す。

    Raises:
        tomllib.TOMLDecodeError: TOML 構文エラーの場合。
        UnicodeDecodeError: ファイルが UTF-8 として読めない場合。
        PermissionError: 読み取り権限がない場合。
        FileNotFoundError: ファイルが存在しない場合。
    """
    with path.open("rb") as f:
        return tomllib.load(f)


def load_pyproject_config(path: Path) -> dict[str, object] | None:
    """pyproject.toml から [tool.sambacompose] セクションを読み込む。

    Returns:
        セクションの辞書。セクションが存在しなければ None。

    Raises:
        tomllib.TOMLDecodeError: TOML 構文エラーの場合。
        UnicodeDecodeError: ファイルが UTF-8 として読めない場合。
        FileNotFoundError: ファイルが存在しない場合。
        PermissionError: 読み取り権限がない場合。
    """
    data = load_toml_config(path)
    tool = data.get(_TOOL_SECTION_KEY)
    if not isinstance(tool, dict):
        return None
    section = tool.get(_SAMBACOMPOSE_SECTION_KEY)
    if not isinstance(section, dict):
        return None
    return section
