"""アサーション評価。

解決済み設定に対して横断的な妥当性条件を登録順に全て評価し、
失敗メッセージを1件残らず収集してから AssertionFailure を送出する。
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Final

from sambacompose.errors import AssertionFailure
from sambacompose.models.resolved import ResolvedConfig
from sambacompose.schema import NSSWINS_PATH, daemon_enable_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assertion:
    """名前付きの妥当性条件。

    Attributes:
        name: 識別用の名前。
        message: 条件が偽のときに報告するメッセージ。
        check: 解決済み設定を受け取り、妥当なら True を返す純粋関数。
    """

    name: str
    message: str
    check: Callable[[ResolvedConfig], bool]


def evaluate_assertions(config: ResolvedConfig, assertions: Sequence[Assertion]) -> None:
    """全アサーションを登録順に評価する。

    最初の失敗で打ち切らず、全ての失敗メッセージを収集する。

    Raises:
        AssertionFailure: 1つ以上のアサーションが失敗した場合。
    """
    failures: list[str] = []
    for assertion in assertions:
        if not assertion.check(config):
            logger.debug("Assertion '%s' failed", assertion.name)
            failures.append(assertion.message)
    if failures:
        raise AssertionFailure(failures)


def _nsswins_requires_winbindd(config: ResolvedConfig) -> bool:
    return not config.get_bool(NSSWINS_PATH) or config.get_bool(
        daemon_enable_path("winbindd")
    )


SAMBA_ASSERTIONS: Final[tuple[Assertion, ...]] = (
    Assertion(
        name="nsswins-requires-winbindd",
        message=(
            "If services.samba.nsswins is enabled, then "
            "services.samba.winbindd.enable must also be enabled"
        ),
        check=_nsswins_requires_winbindd,
    ),
)
"""Samba モジュールが登録するアサーション。"""
