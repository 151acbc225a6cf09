"""フラグメントマージエンジン。

正規化済みフラグメントを宣言順に1回だけ畳み込み、解決済み設定を構築する。
同一パスへの複数の割り当ては、オプションの宣言型ごとの結合規則
（MERGE_POLICY）で結合する。
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import Final

from pydantic import StrictBool, StrictStr, TypeAdapter, ValidationError

from sambacompose.core._conditions import evaluate_condition
from sambacompose.core._migration import NormalizedFragment
from sambacompose.errors import TypeConflictError, UnknownOptionError
from sambacompose.models._base import SambaComposeBaseModel
from sambacompose.models.option import (
    MigrationStatus,
    Option,
    OptionPath,
    OptionType,
    format_path,
)
from sambacompose.models.resolved import ResolvedConfig
from sambacompose.models.result import OverrideNotice
from sambacompose.models.value import (
    ConfigValue,
    ListValue,
    MapValue,
    describe,
    to_python,
)
from sambacompose.schema import OptionSchema

logger = logging.getLogger(__name__)

Combiner = Callable[[ConfigValue, ConfigValue, OptionPath], ConfigValue]
"""(既存値, 新しい値, オプションパス) → 結合後の値。"""


# =============================================================================
# 結合規則
# =============================================================================


def _last_wins(current: ConfigValue, incoming: ConfigValue, path: OptionPath) -> ConfigValue:
    return incoming


def _concatenate(current: ConfigValue, incoming: ConfigValue, path: OptionPath) -> ConfigValue:
    assert isinstance(current, ListValue) and isinstance(incoming, ListValue)
    return ListValue(items=current.items + incoming.items)


def deep_merge(base: MapValue, override: MapValue, path: OptionPath = ()) -> MapValue:
    """マップ値を再帰的にマージする。

    同名キーは override 側が優先される。片方にしかないキーは保持される。
    キーの順序は base の順序に override の新規キーを追加した順。

    Raises:
        TypeConflictError: 同じキーでマップ値とマップ以外の値がぶつかった場合。
    """
    entries: dict[str, ConfigValue] = dict(base.entries)
    for key, value in override.entries:
        existing = entries.get(key)
        match (existing, value):
            case (None, _):
                entries[key] = value
            case (MapValue(), MapValue()):
                entries[key] = deep_merge(existing, value, (*path, key))
            case (MapValue(), _) | (_, MapValue()):
                assert existing is not None
                raise TypeConflictError(
                    f"Cannot merge {describe(value)} into {describe(existing)} "
                    f"at '{format_path((*path, key))}'"
                )
            case _:
                entries[key] = value
    return MapValue(entries=tuple(entries.items()))


def _deep_merge(current: ConfigValue, incoming: ConfigValue, path: OptionPath) -> ConfigValue:
    assert isinstance(current, MapValue) and isinstance(incoming, MapValue)
    return deep_merge(current, incoming, path)


MERGE_POLICY: Final[Mapping[OptionType, Combiner]] = MappingProxyType(
    {
        OptionType.BOOL: _last_wins,
        OptionType.STR: _last_wins,
        OptionType.LIST_OF_STR: _concatenate,
        OptionType.ATTRS: _deep_merge,
    }
)

assert set(MERGE_POLICY.keys()) == set(OptionType), (
    "MERGE_POLICY keys must match OptionType members"
)

_SCALAR_TYPES: Final[frozenset[OptionType]] = frozenset({OptionType.BOOL, OptionType.STR})


# =============================================================================
# 型検査
# =============================================================================

_TYPE_ADAPTERS: Final[Mapping[OptionType, TypeAdapter[object]]] = MappingProxyType(
    {
        OptionType.BOOL: TypeAdapter(StrictBool),
        OptionType.STR: TypeAdapter(StrictStr),
        OptionType.LIST_OF_STR: TypeAdapter(list[StrictStr]),
        OptionType.ATTRS: TypeAdapter(dict[str, object]),
    }
)


def check_value_type(option: Option, value: ConfigValue, source: str) -> ConfigValue:
    """値がオプションの宣言型に適合することを検証する。

    Raises:
        TypeConflictError: 適合しない場合。
    """
    assert option.type is not None
    adapter = _TYPE_ADAPTERS[option.type]
    try:
        adapter.validate_python(to_python(value), strict=True)
    except ValidationError:
        raise TypeConflictError(
            f"The option '{option.dotted}' defined in '{source}' is not of type "
            f"'{option.type.value}' (got {describe(value)})"
        ) from None
    return value


def _wrap(rest: OptionPath, value: ConfigValue) -> MapValue:
    """残りパスに沿って値をネストしたマップで包む。"""
    wrapped: ConfigValue = value
    for segment in reversed(rest):
        wrapped = MapValue(entries=((segment, wrapped),))
    assert isinstance(wrapped, MapValue)
    return wrapped


# =============================================================================
# 畳み込み
# =============================================================================


class MergeResult(SambaComposeBaseModel):
    """マージ結果。

    Attributes:
        config: 解決済み設定。
        overrides: 後のフラグメントに上書きされたスカラー値の記録。
    """

    config: ResolvedConfig
    overrides: tuple[OverrideNotice, ...] = ()


class _FoldState:
    """畳み込み中の割り当て状態。条件式の評価にも使われる。"""

    def __init__(self, schema: OptionSchema) -> None:
        self.schema = schema
        self.defaults = schema.defaults()
        self.assigned: dict[OptionPath, ConfigValue] = {}
        self.sources: dict[OptionPath, str] = {}

    def current(self, path: OptionPath) -> ConfigValue | None:
        resolved = self.schema.owner(path)
        if resolved is None:
            return None
        option, rest = resolved
        value = self.assigned.get(option.path, self.defaults.get(option.path))
        for segment in rest:
            if not isinstance(value, MapValue):
                return None
            value = value.get(segment)
        return value


def _owning_option(schema: OptionSchema, path: OptionPath) -> tuple[Option, OptionPath]:
    resolved = schema.owner(path)
    if resolved is None or resolved[0].status is not MigrationStatus.ACTIVE:
        raise UnknownOptionError(f"The option '{format_path(path)}' does not exist")
    return resolved


def merge_fragments(
    schema: OptionSchema,
    fragments: Sequence[NormalizedFragment],
    flags: Mapping[str, bool] | None = None,
) -> MergeResult:
    """正規化済みフラグメントを宣言順にマージする。

    条件が偽のフラグメントは何も寄与せず、型検査もされない。
    条件式は外部フラグと、その時点までに解決済みの値（デフォルト値を含む）で評価される。
    一度も割り当てられなかったオプションはデフォルト値になる。

    Args:
        schema: オプションスキーマ。
        fragments: 正規化済みフラグメント（宣言順）。
        flags: 外部フィーチャーフラグ。

    Returns:
        解決済み設定と上書き記録。

    Raises:
        TypeConflictError: 値が宣言型に適合しない場合、またはマップと非マップの
            ディープマージが発生した場合。
    """
    effective_flags: Mapping[str, bool] = flags if flags is not None else {}
    state = _FoldState(schema)
    overrides: list[OverrideNotice] = []

    for fragment in fragments:
        if not evaluate_condition(fragment.condition, effective_flags, state.current):
            logger.debug("Skipping fragment '%s': condition is false", fragment.source)
            continue
        for assignment in fragment.assignments:
            option, rest = _owning_option(schema, assignment.path)
            assert option.type is not None
            if rest:
                incoming: ConfigValue = _wrap(rest, assignment.value)
            else:
                incoming = check_value_type(option, assignment.value, fragment.source)

            current = state.assigned.get(option.path)
            if current is None:
                state.assigned[option.path] = incoming
            else:
                if option.type in _SCALAR_TYPES and current != incoming:
                    notice = OverrideNotice(
                        path=option.path,
                        overridden_source=state.sources[option.path],
                        winning_source=fragment.source,
                    )
                    logger.debug(
                        "The option '%s' from '%s' is overridden by '%s'",
                        option.dotted,
                        notice.overridden_source,
                        notice.winning_source,
                    )
                    overrides.append(notice)
                combine = MERGE_POLICY[option.type]
                state.assigned[option.path] = combine(current, incoming, option.path)
            state.sources[option.path] = fragment.source

    values = {
        path: state.assigned.get(path, default) for path, default in state.defaults.items()
    }
    return MergeResult(config=ResolvedConfig(values=values), overrides=tuple(overrides))


__all__ = [
    "MERGE_POLICY",
    "MergeResult",
    "check_value_type",
    "deep_merge",
    "merge_fragments",
]
