"""コンパイルパイプライン。

Normalize → Merge → Assert → Synthesize の順に実行する一方向のパイプライン。
いずれかの段階で失敗した場合は後続の段階を実行せず、部分的な成果物も返さない。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from sambacompose.core._assertions import SAMBA_ASSERTIONS, Assertion, evaluate_assertions
from sambacompose.core._merge import merge_fragments
from sambacompose.core._migration import normalize_fragments
from sambacompose.core._synthesizer import build_artifacts
from sambacompose.errors import CompositionError
from sambacompose.models.fragment import Fragment
from sambacompose.models.result import (
    CompileFailure,
    CompileSuccess,
    Failure,
    RenameNotice,
)
from sambacompose.schema import OptionSchema

logger = logging.getLogger(__name__)


def run_pipeline(
    fragments: Sequence[Fragment],
    schema: OptionSchema,
    flags: Mapping[str, bool] | None = None,
    assertions: Sequence[Assertion] = SAMBA_ASSERTIONS,
) -> CompileSuccess:
    """パイプラインを実行し、失敗時は例外を送出する。

    Args:
        fragments: 宣言順のフラグメント。
        schema: オプションスキーマ。
        flags: 外部フィーチャーフラグ。
        assertions: 評価するアサーション（登録順）。

    Returns:
        解決済み設定と合成されたアーティファクト。

    Raises:
        RemovedOptionError: 削除済みオプションが参照された場合。
        UnknownOptionError: スキーマにないパスが参照された場合。
        TypeConflictError: 値の形状が宣言型と一致しない場合。
        AssertionFailure: アサーションが1つ以上失敗した場合。
    """
    renames: list[RenameNotice] = []
    normalized = normalize_fragments(schema, fragments, renames)
    merged = merge_fragments(schema, normalized, flags)
    evaluate_assertions(merged.config, assertions)
    artifacts = build_artifacts(merged.config)
    return CompileSuccess(
        config=merged.config,
        artifacts=artifacts,
        renames=tuple(renames),
        overrides=merged.overrides,
    )


def compile_configuration(
    fragments: Sequence[Fragment],
    schema: OptionSchema,
    flags: Mapping[str, bool] | None = None,
    assertions: Sequence[Assertion] = SAMBA_ASSERTIONS,
) -> CompileSuccess | CompileFailure:
    """フラグメントをコンパイルし、成功または (kind, message) 組の失敗を返す。

    CompositionError は CompileFailure に変換される。それ以外の例外は
    実装上の不具合として呼び出し元に伝播する。
    """
    try:
        return run_pipeline(fragments, schema, flags, assertions)
    except CompositionError as e:
        logger.warning("Compilation failed with %s: %s", type(e).__name__, e)
        return CompileFailure(
            failures=tuple(Failure(kind=e.kind, message=m) for m in e.messages()),
        )
