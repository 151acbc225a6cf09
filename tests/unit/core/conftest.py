"""コアエンジンテスト共通フィクスチャ・ヘルパー。"""

from __future__ import annotations

import pytest

from sambacompose.models.fragment import Fragment
from sambacompose.schema import OptionSchema, build_samba_schema


@pytest.fixture
def schema() -> OptionSchema:
    return build_samba_schema()


def samba(**options: object) -> dict[str, object]:
    """services.samba 配下の部分ツリーを構築する。"""
    return {"services": {"samba": dict(options)}}


def make_fragment(
    source: str = "test",
    condition: dict[str, object] | None = None,
    **options: object,
) -> Fragment:
    """services.samba 配下に options を割り当てるフラグメントを生成する。"""
    data: dict[str, object] = {"source": source, "tree": samba(**options)}
    if condition is not None:
        data["condition"] = condition
    return Fragment.model_validate(data)
