"""オプション定義モデル。

OptionType（宣言型）、MigrationStatus（移行状態）、Option（オプション定義）を定義する。
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated

from pydantic import Field, StringConstraints, model_validator

from sambacompose.models._base import SambaComposeBaseModel
from sambacompose.models.value import ConfigValue

PathSegment = Annotated[str, StringConstraints(min_length=1)]

OptionPath = tuple[str, ...]
"""オプションパス。文字列セグメントの順序付きタプル。"""


def format_path(path: OptionPath) -> str:
    """パスを表示用のドット区切り文字列に変換する。

    空白やドットを含むセグメントは二重引用符で囲む。
    """
    parts: list[str] = []
    for segment in path:
        if not segment or any(c in segment for c in ' ."'):
            escaped = segment.replace('"', '\\"')
            parts.append(f'"{escaped}"')
        else:
            parts.append(segment)
    return ".".join(parts)


class OptionType(StrEnum):
    """オプションの宣言型。マージ規則の選択に使われる。"""

    BOOL = "bool"
    STR = "str"
    LIST_OF_STR = "list-of-str"
    ATTRS = "attrs"


class MigrationStatus(StrEnum):
    """オプションの移行状態。"""

    ACTIVE = "active"
    RENAMED = "renamed"
    REMOVED = "removed"


class Option(SambaComposeBaseModel):
    """認識される設定キーの定義。

    ACTIVE のオプションは type と default を持つ。
    RENAMED は renamed_to を、REMOVED は removal_message を持つ。

    Attributes:
        path: オプションパス。
        status: 移行状態。
        type: 宣言型。ACTIVE 以外では None。
        default: デフォルト値。ACTIVE 以外では None。
        description: 説明文。
        renamed_to: 移行先のパス。RENAMED のみ。
        removal_message: 削除理由の説明。REMOVED のみ（空文字可）。
    """

    path: tuple[PathSegment, ...] = Field(min_length=1)
    status: MigrationStatus = MigrationStatus.ACTIVE
    type: OptionType | None = None
    default: ConfigValue | None = None
    description: str = ""
    renamed_to: tuple[PathSegment, ...] | None = None
    removal_message: str | None = None

    @model_validator(mode="after")
    def _check_status_fields(self) -> Option:
        """移行状態と付随フィールドの整合性を検証する。"""
        match self.status:
            case MigrationStatus.ACTIVE:
                if self.type is None or self.default is None:
                    raise ValueError(
                        f"Active option '{format_path(self.path)}' requires type and default"
                    )
            case MigrationStatus.RENAMED:
                if self.renamed_to is None:
                    raise ValueError(
                        f"Renamed option '{format_path(self.path)}' requires renamed_to"
                    )
            case MigrationStatus.REMOVED:
                if self.removal_message is None:
                    raise ValueError(
                        f"Removed option '{format_path(self.path)}' requires removal_message"
                    )
        return self

    @property
    def dotted(self) -> str:
        return format_path(self.path)
