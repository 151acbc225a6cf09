"""オプションスキーマ。

プロセス起動時に一度だけ構築され、以後は読み取り専用の値として
各コンパイル呼び出しに明示的に渡される。実行時の登録 API は持たない。
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from sambacompose.errors import SchemaConflictError
from sambacompose.models.option import (
    MigrationStatus,
    Option,
    OptionPath,
    OptionType,
    format_path,
)
from sambacompose.models.value import ConfigValue


class OptionSchema:
    """パスからオプション定義への不変の対応表。

    構築時に次の矛盾を検出し SchemaConflictError を送出する:
    同一パスへの異なる宣言、他のオプションの配下に置かれたオプション、
    解決できない移行先を持つ改名オプション。
    """

    def __init__(self, options: Iterable[Option]) -> None:
        table: dict[OptionPath, Option] = {}
        for option in options:
            existing = table.get(option.path)
            if existing is not None and existing != option:
                raise SchemaConflictError(
                    f"Option '{option.dotted}' is declared twice with conflicting "
                    f"definitions ({_describe_decl(existing)} vs {_describe_decl(option)})"
                )
            table[option.path] = option

        namespaces: set[OptionPath] = set()
        for path in table:
            for i in range(1, len(path)):
                prefix = path[:i]
                if prefix in table:
                    raise SchemaConflictError(
                        f"Option '{format_path(path)}' is nested under option "
                        f"'{format_path(prefix)}'"
                    )
                namespaces.add(prefix)

        self._options: Mapping[OptionPath, Option] = MappingProxyType(table)
        self._namespaces: frozenset[OptionPath] = frozenset(namespaces)

        for option in table.values():
            if option.status is MigrationStatus.RENAMED:
                self._check_rename_target(option)

    def _check_rename_target(self, option: Option) -> None:
        assert option.renamed_to is not None
        resolved = self.owner(option.renamed_to)
        if resolved is None or resolved[0].status is not MigrationStatus.ACTIVE:
            raise SchemaConflictError(
                f"Renamed option '{option.dotted}' points to "
                f"'{format_path(option.renamed_to)}', which is not an active option"
            )
        target, rest = resolved
        if rest and target.type is not OptionType.ATTRS:
            raise SchemaConflictError(
                f"Renamed option '{option.dotted}' points inside "
                f"non-attrs option '{target.dotted}'"
            )

    def lookup(self, path: OptionPath) -> Option | None:
        """パスに完全一致するオプション定義を返す。存在しなければ None。"""
        return self._options.get(tuple(path))

    def owner(self, path: OptionPath) -> tuple[Option, OptionPath] | None:
        """パスを所有するオプションと、その配下の残りパスを返す。

        attrs オプションの配下を指すパスでは残りパスが空でないタプルになる。
        どのオプションにも属さなければ None。
        """
        path = tuple(path)
        for i in range(1, len(path) + 1):
            option = self._options.get(path[:i])
            if option is not None:
                return option, path[i:]
        return None

    def is_namespace(self, path: OptionPath) -> bool:
        """パスがオプションを配下に持つ中間ノードかどうか。"""
        return tuple(path) in self._namespaces

    def defaults(self) -> dict[OptionPath, ConfigValue]:
        """ACTIVE な全オプションのデフォルト値をパス順で返す。"""
        result: dict[OptionPath, ConfigValue] = {}
        for option in self:
            if option.status is MigrationStatus.ACTIVE:
                assert option.default is not None
                result[option.path] = option.default
        return result

    def __iter__(self) -> Iterator[Option]:
        for path in sorted(self._options):
            yield self._options[path]

    def __len__(self) -> int:
        return len(self._options)

    def __contains__(self, path: object) -> bool:
        return path in self._options


def _describe_decl(option: Option) -> str:
    if option.status is MigrationStatus.ACTIVE and option.type is not None:
        return option.type.value
    return option.status.value
