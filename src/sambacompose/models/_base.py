"""全ドメインモデルの基底クラス。

extra="forbid" と frozen=True をここで一元管理する。
コンパイル結果・スキーマ・アーティファクトはすべて構築後に変更されない。
"""

from pydantic import BaseModel, ConfigDict


class SambaComposeBaseModel(BaseModel):
    """全ドメインモデルの基底クラス。extra="forbid" で厳格モードを一元管理。"""

    model_config = ConfigDict(extra="forbid", frozen=True)
