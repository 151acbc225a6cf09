"""フラグメントソースローダー。

TOML 形式のフラグメントファイルを読み込み、Fragment モデルとして構築する。

ファイル形式::

    [[fragments]]
    when = { flag = "samba" }

    [fragments.config.services.samba]
    enable = true

when を省略したフラグメントは常に適用される。
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from sambacompose.models.fragment import Fragment

FRAGMENTS_KEY: Final[str] = "fragments"
_CONDITION_KEY: Final[str] = "when"
_TREE_KEY: Final[str] = "config"
_ALLOWED_KEYS: Final[frozenset[str]] = frozenset({_CONDITION_KEY, _TREE_KEY})


class SourceError(Exception):
    """フラグメントソースの読み込み・検証エラー。

    エラーメッセージには問題のファイルと位置が含まれる。
    """


def _build_fragment(raw: object, source: str) -> Fragment:
    if not isinstance(raw, dict):
        raise SourceError(f"{source}: each fragment must be a table")
    unknown = sorted(set(raw) - _ALLOWED_KEYS)
    if unknown:
        raise SourceError(
            f"{source}: unknown fragment keys {unknown}; "
            f"expected '{_CONDITION_KEY}' and '{_TREE_KEY}'"
        )
    data: dict[str, object] = {"source": source, "tree": raw.get(_TREE_KEY, {})}
    if _CONDITION_KEY in raw:
        data["condition"] = raw[_CONDITION_KEY]
    try:
        return Fragment.model_validate(data)
    except ValidationError as e:
        raise SourceError(f"{source}: invalid fragment: {e}") from None


def load_fragment_file(path: Path) -> list[Fragment]:
    """単一の TOML ファイルからフラグメントを宣言順に読み込む。

    各フラグメントの source は "<ファイル名>#<番号>"（1始まり）。

    Args:
        path: TOML ファイルのパス。

    Returns:
        ファイル内のフラグメント。fragments キーがなければ空リスト。

    Raises:
        SourceError: UTF-8 として読めない場合、TOML 構文エラー、
            または不正なフラグメント定義の場合。
        OSError: ファイルが存在しない場合やアクセスエラーの場合。
    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise SourceError(f"{path}: {e}") from None

    raw_fragments = data.get(FRAGMENTS_KEY, [])
    if not isinstance(raw_fragments, list):
        raise SourceError(f"{path}: '{FRAGMENTS_KEY}' must be an array of tables")
    return [
        _build_fragment(raw, f"{path.name}#{index}")
        for index, raw in enumerate(raw_fragments, start=1)
    ]


def _iter_source_files(paths: Iterable[Path]) -> Iterable[Path]:
    for path in paths:
        if path.is_dir():
            yield from sorted(
                p for p in path.iterdir() if p.is_file() and p.name.endswith(".toml")
            )
        else:
            yield path


def load_fragment_sources(paths: Iterable[Path]) -> list[Fragment]:
    """ファイルとディレクトリの並びからフラグメントを読み込む。

    ディレクトリは直下の .toml ファイルを名前順に読み込む。
    宣言順（= 引数順、ディレクトリ内は名前順、ファイル内は出現順）が保持される。

    Raises:
        SourceError: いずれかのファイルが不正な場合。
        OSError: ファイルが存在しない場合やアクセスエラーの場合。
    """
    fragments: list[Fragment] = []
    for path in _iter_source_files(paths):
        fragments.extend(load_fragment_file(path))
    return fragments
