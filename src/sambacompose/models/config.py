"""ツール設定モデル。

設定ファイル・pyproject.toml・CLI オプションから解決される sambacompose 自身の設定。
コンパイル対象の Samba 設定（フラグメント）とは別物。
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Annotated, Final

from pydantic import Field, StrictBool, StringConstraints, field_validator

from sambacompose.models._base import SambaComposeBaseModel

FLAG_NAME_PATTERN: Final[str] = r"^[A-Za-z0-9_.-]+$"
_FLAG_NAME_RE: re.Pattern[str] = re.compile(FLAG_NAME_PATTERN)


class OutputFormat(StrEnum):
    """compile コマンドの出力形式。"""

    INI = "ini"
    JSON = "json"


class SambaComposeConfig(SambaComposeBaseModel):
    """全設定項目を統合した不変モデル。デフォルト値のみで有効なインスタンスを構築可能。

    Attributes:
        output_format: compile コマンドの出力形式。
        flags: フラグメント条件から参照される外部フィーチャーフラグの既定値。
        sources: SOURCES 引数省略時に読み込むフラグメントファイル・ディレクトリ。
    """

    output_format: OutputFormat = OutputFormat.INI
    flags: dict[str, StrictBool] = Field(default_factory=dict)
    sources: tuple[Annotated[str, StringConstraints(min_length=1)], ...] = ()

    @field_validator("flags")
    @classmethod
    def validate_flag_names(cls, v: dict[str, bool]) -> dict[str, bool]:
        """フラグ名の形式を検証する。"""
        for name in v:
            if not _FLAG_NAME_RE.fullmatch(name):
                msg = f"Invalid flag name '{name}': must match pattern {FLAG_NAME_PATTERN}"
                raise ValueError(msg)
        return v
