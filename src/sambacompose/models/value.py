"""設定値の再帰的な判別共用体。

kind フィールドの固定値で型を一意に特定する。
マージ処理とシリアライズ処理はこの共用体に対する網羅的な match で実装される。
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Annotated, Literal, Union, assert_never

from pydantic import Field, StrictBool, StrictFloat, StrictInt, StrictStr, model_validator

from sambacompose.models._base import SambaComposeBaseModel

Scalar = StrictStr | StrictBool | StrictInt | StrictFloat
"""スカラー値として許可される Python 型。"""


class ScalarValue(SambaComposeBaseModel):
    """スカラー値。判別キー: kind="scalar"。"""

    kind: Literal["scalar"] = "scalar"
    value: Scalar


class ListValue(SambaComposeBaseModel):
    """リスト値。判別キー: kind="list"。要素の順序と重複は保持される。"""

    kind: Literal["list"] = "list"
    items: tuple[ConfigValue, ...] = ()


class MapValue(SambaComposeBaseModel):
    """マップ値。判別キー: kind="map"。

    entries はキーの挿入順を保持する (キー, 値) のタプル。
    キーの重複は許可しない。
    """

    kind: Literal["map"] = "map"
    entries: tuple[tuple[str, ConfigValue], ...] = ()

    @model_validator(mode="after")
    def _reject_duplicate_keys(self) -> MapValue:
        seen: set[str] = set()
        for key, _ in self.entries:
            if key in seen:
                raise ValueError(f"Duplicate key in map value: '{key}'")
            seen.add(key)
        return self

    def get(self, key: str) -> ConfigValue | None:
        for entry_key, value in self.entries:
            if entry_key == key:
                return value
        return None

    def keys(self) -> Iterator[str]:
        return (key for key, _ in self.entries)


ConfigValue = Annotated[
    Union[ScalarValue, ListValue, MapValue],
    Field(discriminator="kind"),
]
"""設定値の判別共用体。kind フィールドの値で型を自動選択する。"""

ListValue.model_rebuild()
MapValue.model_rebuild()


def from_python(obj: object) -> ScalarValue | ListValue | MapValue:
    """TOML 等から得た素の Python 値を ConfigValue に変換する。

    Args:
        obj: 変換対象の値。str / bool / int / float / list / tuple / Mapping。

    Returns:
        対応する ConfigValue。

    Raises:
        TypeError: 表現できない型の値が含まれる場合。
    """
    match obj:
        case ScalarValue() | ListValue() | MapValue():
            return obj
        case bool() | str() | int() | float():
            return ScalarValue(value=obj)
        case list() | tuple():
            return ListValue(items=tuple(from_python(item) for item in obj))
        case Mapping():
            entries: list[tuple[str, ScalarValue | ListValue | MapValue]] = []
            for key, item in obj.items():
                if not isinstance(key, str):
                    raise TypeError(
                        f"Map keys must be strings, got {type(key).__name__}"
                    )
                entries.append((key, from_python(item)))
            return MapValue(entries=tuple(entries))
        case _:
            raise TypeError(f"Unsupported configuration value type: {type(obj).__name__}")


def to_python(value: ScalarValue | ListValue | MapValue) -> object:
    """ConfigValue を素の Python 値 (str / bool / int / float / list / dict) に戻す。"""
    match value:
        case ScalarValue():
            return value.value
        case ListValue():
            return [to_python(item) for item in value.items]
        case MapValue():
            return {key: to_python(item) for key, item in value.entries}
        case _:
            assert_never(value)


def describe(value: ScalarValue | ListValue | MapValue) -> str:
    """エラーメッセージ用に値の形状を短く表す。"""
    match value:
        case ScalarValue():
            return type(value.value).__name__
        case ListValue():
            return "list"
        case MapValue():
            return "map"
        case _:
            assert_never(value)
