"""解決済み設定モデル。

全ての適用フラグメントをマージした単一のツリー。ACTIVE な全オプションの
値（未割り当てならデフォルト値）をパスをキーとして保持する。
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import Field, field_serializer, field_validator

from sambacompose.models._base import SambaComposeBaseModel
from sambacompose.models.option import OptionPath, format_path
from sambacompose.models.value import ConfigValue, ListValue, MapValue, ScalarValue, to_python


class ResolvedConfig(SambaComposeBaseModel):
    """マージ結果の不変ツリー。

    Attributes:
        values: オプションパス → 値。読み取り専用のマッピングとして保持される。
    """

    values: Mapping[OptionPath, ConfigValue] = Field(
        default_factory=lambda: MappingProxyType({})
    )

    @field_validator("values", mode="after")
    @classmethod
    def _freeze_values(
        cls, values: Mapping[OptionPath, ConfigValue]
    ) -> Mapping[OptionPath, ConfigValue]:
        return MappingProxyType(dict(values))

    @field_serializer("values")
    def _serialize_values(
        self, values: Mapping[OptionPath, ConfigValue]
    ) -> dict[OptionPath, ConfigValue]:
        return dict(values)

    def __getitem__(self, path: OptionPath) -> ConfigValue:
        try:
            return self.values[tuple(path)]
        except KeyError:
            raise KeyError(f"No resolved value for '{format_path(tuple(path))}'") from None

    def __contains__(self, path: object) -> bool:
        return path in self.values

    def get_bool(self, path: OptionPath) -> bool:
        value = self[path]
        if not isinstance(value, ScalarValue) or not isinstance(value.value, bool):
            raise TypeError(f"'{format_path(tuple(path))}' is not a boolean")
        return value.value

    def get_str(self, path: OptionPath) -> str:
        value = self[path]
        if not isinstance(value, ScalarValue) or not isinstance(value.value, str):
            raise TypeError(f"'{format_path(tuple(path))}' is not a string")
        return value.value

    def get_str_list(self, path: OptionPath) -> tuple[str, ...]:
        value = self[path]
        if not isinstance(value, ListValue):
            raise TypeError(f"'{format_path(tuple(path))}' is not a list")
        items: list[str] = []
        for item in value.items:
            if not isinstance(item, ScalarValue) or not isinstance(item.value, str):
                raise TypeError(f"'{format_path(tuple(path))}' is not a list of strings")
            items.append(item.value)
        return tuple(items)

    def get_map(self, path: OptionPath) -> MapValue:
        value = self[path]
        if not isinstance(value, MapValue):
            raise TypeError(f"'{format_path(tuple(path))}' is not a map")
        return value

    def as_tree(self) -> dict[str, object]:
        """ネストした素の辞書に変換する。JSON 出力用。"""
        tree: dict[str, object] = {}
        for path, value in sorted(self.values.items()):
            node = tree
            for segment in path[:-1]:
                child = node.setdefault(segment, {})
                assert isinstance(child, dict)
                node = child
            node[path[-1]] = to_python(value)
        return tree
