"""フラグメント条件の評価。

評価は副作用を持たず、外部フラグとその時点までに解決済みの値のみに依存する。
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import assert_never

from sambacompose.models.fragment import (
    AllCondition,
    AlwaysCondition,
    AnyCondition,
    Condition,
    FlagCondition,
    NotCondition,
    OptionCondition,
)
from sambacompose.models.option import OptionPath
from sambacompose.models.value import ConfigValue, ScalarValue

ValueLookup = Callable[[OptionPath], ConfigValue | None]
"""パスから解決済みの値を返す関数。値がなければ None。"""


def evaluate_condition(
    condition: Condition,
    flags: Mapping[str, bool],
    lookup: ValueLookup,
) -> bool:
    """条件式を評価する。

    Args:
        condition: 評価対象の条件式。
        flags: 外部フィーチャーフラグ。未指定のフラグは偽。
        lookup: オプション値の参照関数。

    Returns:
        条件が真なら True。
    """
    match condition:
        case AlwaysCondition():
            return True
        case FlagCondition():
            return flags.get(condition.flag, False) is True
        case OptionCondition():
            value = lookup(condition.option)
            if not isinstance(value, ScalarValue):
                return False
            # True == 1 を区別するため型も比較する
            return type(value.value) is type(condition.equals) and (
                value.value == condition.equals
            )
        case AllCondition():
            return all(evaluate_condition(c, flags, lookup) for c in condition.conditions)
        case AnyCondition():
            return any(evaluate_condition(c, flags, lookup) for c in condition.conditions)
        case NotCondition():
            return not evaluate_condition(condition.condition, flags, lookup)
        case _:
            assert_never(condition)


def rewrite_condition_paths(
    condition: Condition,
    rewrite: Callable[[OptionPath], OptionPath],
) -> Condition:
    """条件式中の全オプションパスを rewrite で置き換えた新しい条件式を返す。"""
    match condition:
        case AlwaysCondition() | FlagCondition():
            return condition
        case OptionCondition():
            return condition.model_copy(update={"option": rewrite(condition.option)})
        case AllCondition() | AnyCondition():
            children = tuple(
                rewrite_condition_paths(c, rewrite) for c in condition.conditions
            )
            return condition.model_copy(update={"conditions": children})
        case NotCondition():
            return condition.model_copy(
                update={"condition": rewrite_condition_paths(condition.condition, rewrite)}
            )
        case _:
            assert_never(condition)
