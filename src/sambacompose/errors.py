"""コンパイルエラーの階層。

全てのエラーは CompositionError を継承し、安定した kind 文字列を持つ。
kind は呼び出し元に返す (kind, message) 組の種別として使われる。
いずれのエラーも発生したコンパイルを打ち切る。
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar


class CompositionError(Exception):
    """コンパイル失敗の基底クラス。"""

    kind: ClassVar[str] = "composition"

    def messages(self) -> tuple[str, ...]:
        """呼び出し元に報告するメッセージ群。既定では str(self) のみ。"""
        return (str(self),)


class SchemaConflictError(CompositionError):
    """スキーマ構築時に同一パスへの矛盾した宣言が検出された場合のエラー。"""

    kind: ClassVar[str] = "schema-conflict"


class UnknownOptionError(CompositionError):
    """フラグメントがスキーマに存在しないパスを参照した場合のエラー。"""

    kind: ClassVar[str] = "unknown-option"


class RemovedOptionError(CompositionError):
    """削除済みオプションが参照された場合のエラー。

    メッセージにはスキーマ作成者が宣言した説明文が含まれる。
    """

    kind: ClassVar[str] = "removed-option"

    def __init__(self, path: str, explanation: str) -> None:
        self.path = path
        self.explanation = explanation
        message = f"The option '{path}' can no longer be used since it's been removed."
        if explanation:
            message = f"{message} {explanation}"
        super().__init__(message)


class TypeConflictError(CompositionError):
    """値の形状がオプションの宣言型と一致しない場合のエラー。

    マップ値とマップ以外の値のディープマージもこのエラーになる。
    """

    kind: ClassVar[str] = "type-conflict"


class AssertionFailure(CompositionError):
    """1つ以上のアサーションが失敗した場合のエラー。失敗メッセージを全て保持する。"""

    kind: ClassVar[str] = "assertion"

    def __init__(self, failures: Sequence[str]) -> None:
        self.failures: tuple[str, ...] = tuple(failures)
        bullet_list = "\n".join(f"- {message}" for message in self.failures)
        super().__init__(f"Failed assertions:\n{bullet_list}")

    def messages(self) -> tuple[str, ...]:
        return self.failures
