"""移行レイヤー。

マージ開始前に全フラグメントの全パスを正規化する。
改名オプションへの参照は新しいパスに書き換え、削除済みオプションへの参照は
スキーマが宣言した説明文付きの RemovedOptionError でコンパイルを打ち切る。
条件式の真偽に関わらず全フラグメントに適用される。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from sambacompose.core._conditions import rewrite_condition_paths
from sambacompose.errors import RemovedOptionError, TypeConflictError, UnknownOptionError
from sambacompose.models._base import SambaComposeBaseModel
from sambacompose.models.fragment import Condition, Fragment
from sambacompose.models.option import MigrationStatus, OptionPath, format_path
from sambacompose.models.result import RenameNotice
from sambacompose.models.value import ConfigValue, from_python
from sambacompose.schema import OptionSchema

logger = logging.getLogger(__name__)


class Assignment(SambaComposeBaseModel):
    """正規化済みのパスへの値の割り当て。

    path は ACTIVE なオプションのパス、または attrs オプション配下のパス。
    """

    path: OptionPath
    value: ConfigValue


class NormalizedFragment(SambaComposeBaseModel):
    """全パスが正規化されたフラグメント。マージエンジンの入力。"""

    source: str
    condition: Condition
    assignments: tuple[Assignment, ...] = ()


def normalize(
    schema: OptionSchema,
    raw_path: OptionPath,
    renames: list[RenameNotice] | None = None,
    *,
    source: str = "<inline>",
) -> OptionPath:
    """パスを正規パスに変換する。

    改名オプション（またはその配下）のパスは移行先に書き換え、renames に記録する。
    正規パスやスキーマにないパスはそのまま返す（冪等）。

    Args:
        schema: オプションスキーマ。
        raw_path: 正規化対象のパス。
        renames: 改名記録の追記先。None なら記録しない。
        source: 診断用の出所ラベル。

    Returns:
        正規パス。

    Raises:
        RemovedOptionError: 削除済みオプション（またはその配下）のパスの場合。
    """
    path = tuple(raw_path)
    resolved = schema.owner(path)
    if resolved is None:
        return path
    option, rest = resolved
    match option.status:
        case MigrationStatus.ACTIVE:
            return path
        case MigrationStatus.REMOVED:
            raise RemovedOptionError(option.dotted, option.removal_message or "")
        case MigrationStatus.RENAMED:
            assert option.renamed_to is not None
            new_path = (*option.renamed_to, *rest)
            logger.info(
                "The option '%s' defined in '%s' has been renamed to '%s'",
                format_path(path),
                source,
                format_path(new_path),
            )
            if renames is not None:
                renames.append(RenameNotice(source=source, old_path=path, new_path=new_path))
            return new_path


def _flatten(
    schema: OptionSchema,
    node: Mapping[str, object],
    prefix: OptionPath,
    source: str,
    out: list[Assignment],
    renames: list[RenameNotice],
) -> None:
    for key, value in node.items():
        path = (*prefix, key)
        if schema.is_namespace(path):
            if not isinstance(value, Mapping):
                raise TypeConflictError(
                    f"'{format_path(path)}' in '{source}' groups options and must be "
                    f"a table, got {type(value).__name__}"
                )
            _flatten(schema, value, path, source, out, renames)
            continue
        if schema.owner(path) is None:
            raise UnknownOptionError(
                f"The option '{format_path(path)}' defined in '{source}' does not exist"
            )
        canonical = normalize(schema, path, renames, source=source)
        try:
            config_value = from_python(value)
        except TypeError as e:
            raise TypeConflictError(
                f"Invalid value for '{format_path(path)}' in '{source}': {e}"
            ) from None
        out.append(Assignment(path=canonical, value=config_value))


def normalize_fragment(
    schema: OptionSchema,
    fragment: Fragment,
    renames: list[RenameNotice] | None = None,
) -> NormalizedFragment:
    """フラグメントのツリーを平坦化し、全パスを正規化する。

    条件式が参照するパスも同様に正規化する。

    Raises:
        RemovedOptionError: 削除済みオプションが参照された場合。
        UnknownOptionError: スキーマにないパスが参照された場合。
        TypeConflictError: 名前空間ノードにテーブル以外が割り当てられた場合、
            または表現できない型の値が含まれる場合。
    """
    notices: list[RenameNotice] = renames if renames is not None else []
    assignments: list[Assignment] = []
    _flatten(schema, fragment.tree, (), fragment.source, assignments, notices)

    def _rewrite(path: OptionPath) -> OptionPath:
        if schema.owner(path) is None:
            raise UnknownOptionError(
                f"The option '{format_path(path)}' referenced by the condition of "
                f"'{fragment.source}' does not exist"
            )
        return normalize(schema, path, notices, source=fragment.source)

    condition = rewrite_condition_paths(fragment.condition, _rewrite)
    return NormalizedFragment(
        source=fragment.source,
        condition=condition,
        assignments=tuple(assignments),
    )


def _reject_removed(
    schema: OptionSchema,
    node: Mapping[str, object],
    prefix: OptionPath,
) -> None:
    for key, value in node.items():
        path = (*prefix, key)
        resolved = schema.owner(path)
        if resolved is None:
            if isinstance(value, Mapping):
                _reject_removed(schema, value, path)
            continue
        # 正規化と同じ経路で RemovedOptionError を送出させる
        if resolved[0].status is MigrationStatus.REMOVED:
            normalize(schema, path)


def normalize_fragments(
    schema: OptionSchema,
    fragments: Sequence[Fragment],
    renames: list[RenameNotice] | None = None,
) -> list[NormalizedFragment]:
    """全フラグメントを宣言順に正規化する。

    削除済みオプションの参照は他のフラグメントの不備より優先して報告するため、
    正規化の前に全フラグメントを走査する。それ以外は最初のエラーで打ち切る。
    """
    for fragment in fragments:
        _reject_removed(schema, fragment.tree, ())
    return [normalize_fragment(schema, f, renames) for f in fragments]
