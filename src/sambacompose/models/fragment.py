"""フラグメントと条件式のモデル。

Fragment は条件式（Condition）と部分設定ツリーの組。
Condition は kind フィールドで判別される共用体で、TOML からは
`{flag = "name"}` のように kind を省略した形式でも記述できる。
"""

from __future__ import annotations

from typing import Annotated, Any, Final, Literal, Union

from pydantic import Field, field_validator

from sambacompose.models._base import SambaComposeBaseModel
from sambacompose.models.option import PathSegment
from sambacompose.models.value import Scalar

# kind 省略時の判別キー候補
_CONDITION_KINDS: Final[frozenset[str]] = frozenset(
    {"always", "flag", "option", "all", "any", "not"}
)


def with_condition_kind(data: object) -> object:
    """kind を省略した条件式の辞書に判別キーを補う。

    `{all = [...]}` は `{kind = "all", conditions = [...]}` に、
    `{not = {...}}` は `{kind = "not", condition = {...}}` に変換される。
    辞書以外や kind を既に持つ入力はそのまま返し、後続のバリデーションに委ねる。
    """
    if not isinstance(data, dict) or "kind" in data:
        return data
    kinds = [key for key in data if key in _CONDITION_KINDS]
    if len(kinds) != 1:
        return data
    kind = kinds[0]
    converted: dict[str, object] = dict(data)
    if kind in ("all", "any"):
        converted["conditions"] = converted.pop(kind)
    elif kind == "not":
        converted["condition"] = converted.pop(kind)
    elif kind == "always":
        if converted.pop("always") is not True:
            raise ValueError("'always' condition must be set to true")
    converted["kind"] = kind
    return converted


class AlwaysCondition(SambaComposeBaseModel):
    """常に真となる条件。"""

    kind: Literal["always"] = "always"


class FlagCondition(SambaComposeBaseModel):
    """外部フィーチャーフラグが真のとき真となる条件。未指定のフラグは偽として扱う。"""

    kind: Literal["flag"] = "flag"
    flag: str = Field(min_length=1)


class OptionCondition(SambaComposeBaseModel):
    """その時点までに解決済みのオプション値が equals と等しいとき真となる条件。"""

    kind: Literal["option"] = "option"
    option: tuple[PathSegment, ...] = Field(min_length=1)
    equals: Scalar = True


class AllCondition(SambaComposeBaseModel):
    """全ての子条件が真のとき真となる条件。空なら真。"""

    kind: Literal["all"] = "all"
    conditions: tuple[Condition, ...] = ()

    @field_validator("conditions", mode="before")
    @classmethod
    def _infer_kinds(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [with_condition_kind(item) for item in v]
        return v


class AnyCondition(SambaComposeBaseModel):
    """いずれかの子条件が真のとき真となる条件。空なら偽。"""

    kind: Literal["any"] = "any"
    conditions: tuple[Condition, ...] = ()

    @field_validator("conditions", mode="before")
    @classmethod
    def _infer_kinds(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [with_condition_kind(item) for item in v]
        return v


class NotCondition(SambaComposeBaseModel):
    """子条件の否定。"""

    kind: Literal["not"] = "not"
    condition: Condition

    @field_validator("condition", mode="before")
    @classmethod
    def _infer_kind(cls, v: Any) -> Any:
        return with_condition_kind(v)


Condition = Annotated[
    Union[
        AlwaysCondition,
        FlagCondition,
        OptionCondition,
        AllCondition,
        AnyCondition,
        NotCondition,
    ],
    Field(discriminator="kind"),
]
"""条件式の判別共用体。"""

AllCondition.model_rebuild()
AnyCondition.model_rebuild()
NotCondition.model_rebuild()


class Fragment(SambaComposeBaseModel):
    """条件付きの部分設定。

    Attributes:
        source: 診断メッセージに使う出所ラベル（ファイル名等）。
        condition: 適用条件。省略時は常に適用。
        tree: 部分設定ツリー。ネストした辞書でパス→値の割り当てを表す。
    """

    source: str = Field(default="<inline>", min_length=1)
    condition: Condition = Field(default_factory=AlwaysCondition)
    tree: dict[str, Any] = Field(default_factory=dict)

    @field_validator("condition", mode="before")
    @classmethod
    def _infer_kind(cls, v: Any) -> Any:
        return with_condition_kind(v)


__all__ = [
    "AllCondition",
    "AlwaysCondition",
    "AnyCondition",
    "Condition",
    "FlagCondition",
    "Fragment",
    "NotCondition",
    "OptionCondition",
    "with_condition_kind",
]
