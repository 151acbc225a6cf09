"""SambaComposeBaseModel のテスト。

全モデルは extra="forbid" かつ frozen で動作する。
"""

import pytest
from pydantic import ValidationError

from sambacompose.models._base import SambaComposeBaseModel


class SampleModel(SambaComposeBaseModel):
    """テスト用のサブクラス。"""

    name: str
    value: int


class TestSambaComposeBaseModelExtraForbid:
    """extra="forbid" により未定義フィールドが拒否されることを検証。"""

    def test_valid_fields_accepted(self) -> None:
        """定義済みフィールドのみでインスタンス生成が成功する。"""
        model = SampleModel(name="test", value=42)
        assert model.name == "test"
        assert model.value == 42

    def test_extra_field_rejected(self) -> None:
        """未定義フィールドを渡すと ValidationError が発生する。"""
        with pytest.raises(ValidationError, match="extra_forbidden"):
            SampleModel(name="test", value=42, unknown_field="x")  # type: ignore[call-arg]


class TestSambaComposeBaseModelFrozen:
    """frozen=True により構築後のフィールド変更が禁止されることを検証。"""

    def test_field_assignment_rejected(self) -> None:
        model = SampleModel(name="test", value=42)
        with pytest.raises(ValidationError, match="frozen"):
            model.name = "changed"
