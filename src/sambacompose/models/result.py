"""コンパイル結果の定義。

CompileOutcome は status フィールドの固定値で型を一意に特定する判別共用体。
失敗時は (kind, message) 組のタプルのみを返し、部分的な成果物は含めない。
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field

from sambacompose.models._base import SambaComposeBaseModel
from sambacompose.models.artifacts import ArtifactBundle
from sambacompose.models.option import OptionPath
from sambacompose.models.resolved import ResolvedConfig


class RenameNotice(SambaComposeBaseModel):
    """改名オプションの参照が書き換えられたことの診断情報。

    Attributes:
        source: 参照元フラグメントの出所ラベル。
        old_path: 旧パス。
        new_path: 書き換え後のパス。
    """

    source: str
    old_path: OptionPath
    new_path: OptionPath


class OverrideNotice(SambaComposeBaseModel):
    """スカラー値が後のフラグメントで上書きされたことの診断情報。

    Attributes:
        path: 上書きされたオプションパス。
        overridden_source: 上書きされた側のフラグメント。
        winning_source: 採用された側のフラグメント。
    """

    path: OptionPath
    overridden_source: str
    winning_source: str


class Failure(SambaComposeBaseModel):
    """呼び出し元に返す失敗1件。"""

    kind: str = Field(min_length=1)
    message: str = Field(min_length=1)


class CompileSuccess(SambaComposeBaseModel):
    """コンパイル成功。判別キー: status="success"。

    Attributes:
        status: 判別キー。固定値 "success"。
        config: 解決済み設定。
        artifacts: 合成されたアーティファクト。
        renames: 移行レイヤーが書き換えたパスの記録。
        overrides: スカラー値の上書き記録。
    """

    status: Literal["success"] = "success"
    config: ResolvedConfig
    artifacts: ArtifactBundle
    renames: tuple[RenameNotice, ...] = ()
    overrides: tuple[OverrideNotice, ...] = ()


class CompileFailure(SambaComposeBaseModel):
    """コンパイル失敗。判別キー: status="failure"。"""

    status: Literal["failure"] = "failure"
    failures: tuple[Failure, ...] = Field(min_length=1)


CompileOutcome = Annotated[
    Union[CompileSuccess, CompileFailure],
    Field(discriminator="status"),
]
"""コンパイル結果の判別共用体。"""
