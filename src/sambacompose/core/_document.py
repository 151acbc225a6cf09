"""設定ドキュメント生成。

services.samba.settings を INI セクションに降ろす。セクション名とキーは
ソートされるため、同一入力からは常に同一のドキュメントが得られる。
"""

from __future__ import annotations

from typing import assert_never

from sambacompose.errors import TypeConflictError
from sambacompose.models.artifacts import ConfigDocument, IniSection, format_ini_atom
from sambacompose.models.option import format_path
from sambacompose.models.resolved import ResolvedConfig
from sambacompose.models.value import ConfigValue, ListValue, MapValue, ScalarValue, describe
from sambacompose.schema import SETTINGS_PATH


def _to_atom(value: ConfigValue, section: str, key: str) -> str | bool | int | float:
    """INI の値に変換する。リストは要素を空白区切りで連結する。"""
    match value:
        case ScalarValue():
            return value.value
        case ListValue():
            parts: list[str] = []
            for item in value.items:
                if not isinstance(item, ScalarValue):
                    raise TypeConflictError(
                        f"List value of '{format_path((*SETTINGS_PATH, section, key))}' "
                        f"may only contain scalars, got {describe(item)}"
                    )
                parts.append(format_ini_atom(item.value))
            return " ".join(parts)
        case MapValue():
            raise TypeConflictError(
                f"'{format_path((*SETTINGS_PATH, section, key))}' is nested too deeply: "
                "ini settings only allow section -> key -> value"
            )
        case _:
            assert_never(value)


def build_config_document(config: ResolvedConfig) -> ConfigDocument:
    """解決済み設定から smb.conf のドキュメントを生成する。

    Raises:
        TypeConflictError: 設定ツリーが section -> key -> value の形をしていない場合、
            またはセクション名が空の場合。
    """
    settings = config.get_map(SETTINGS_PATH)
    sections: list[IniSection] = []
    for name in sorted(settings.keys()):
        if not name:
            raise TypeConflictError(
                f"'{format_path(SETTINGS_PATH)}' contains a section with an empty name"
            )
        section_value = settings.get(name)
        if not isinstance(section_value, MapValue):
            assert section_value is not None
            raise TypeConflictError(
                f"'{format_path((*SETTINGS_PATH, name))}' must be a section (table), "
                f"got {describe(section_value)}"
            )
        entries: list[tuple[str, str | bool | int | float]] = []
        for key in sorted(section_value.keys()):
            item = section_value.get(key)
            assert item is not None
            entries.append((key, _to_atom(item, name, key)))
        sections.append(IniSection(name=name, entries=tuple(entries)))
    return ConfigDocument(sections=tuple(sections))
