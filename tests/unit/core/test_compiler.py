"""コンパイルパイプラインのテスト。

成功時の結果と、各段階の失敗が (kind, message) 組に変換されることを検証する。
"""

from __future__ import annotations

import logging

import pytest

from sambacompose.core import compile_configuration, run_pipeline
from sambacompose.errors import AssertionFailure
from sambacompose.models.result import CompileFailure, CompileSuccess, Failure
from sambacompose.schema import ENABLE_PATH, OptionSchema
from tests.unit.core.conftest import make_fragment


class TestCompileSuccess:
    """成功時の結果を検証。"""

    def test_full_pipeline(self, schema: OptionSchema) -> None:
        outcome = compile_configuration(
            [
                make_fragment(source="base", enable=True, securityType="user"),
                make_fragment(
                    source="shares",
                    condition={"flag": "public"},
                    shares={"public": {"path": "/srv/public"}},
                ),
            ],
            schema,
            {"public": True},
        )
        assert isinstance(outcome, CompileSuccess)
        assert outcome.config.get_bool(ENABLE_PATH) is True
        assert outcome.artifacts.document.render() == (
            "[global]\nsecurity=user\n\n[public]\npath=/srv/public\n"
        )
        assert [n.old_path[-1] for n in outcome.renames] == ["securityType", "shares"]
        assert len(outcome.artifacts.units) == 3

    def test_deterministic(self, schema: OptionSchema) -> None:
        fragments = [
            make_fragment(enable=True, settings={"b": {"x": 1}, "a": {"y": ["p", "q"]}}),
        ]
        first = compile_configuration(fragments, schema)
        second = compile_configuration(fragments, schema)
        assert isinstance(first, CompileSuccess) and isinstance(second, CompileSuccess)
        assert first.artifacts.document.render() == second.artifacts.document.render()
        assert first.artifacts == second.artifacts


class TestCompileFailure:
    """失敗時の結果を検証。"""

    def test_removed_option(self, schema: OptionSchema) -> None:
        outcome = compile_configuration([make_fragment(extraConfig="x")], schema)
        assert outcome == CompileFailure(
            failures=(
                Failure(
                    kind="removed-option",
                    message=(
                        "The option 'services.samba.extraConfig' can no longer be used "
                        "since it's been removed. Use services.samba.settings instead."
                    ),
                ),
            )
        )

    def test_unknown_option(self, schema: OptionSchema) -> None:
        outcome = compile_configuration([make_fragment(enabel=True)], schema)
        assert isinstance(outcome, CompileFailure)
        assert outcome.failures[0].kind == "unknown-option"

    def test_type_conflict(self, schema: OptionSchema) -> None:
        outcome = compile_configuration([make_fragment(enable="yes")], schema)
        assert isinstance(outcome, CompileFailure)
        assert outcome.failures[0].kind == "type-conflict"

    def test_settings_shape_is_type_conflict(self, schema: OptionSchema) -> None:
        outcome = compile_configuration(
            [make_fragment(settings={"workgroup": "WG"})], schema
        )
        assert isinstance(outcome, CompileFailure)
        assert outcome.failures[0].kind == "type-conflict"

    def test_empty_section_name_is_type_conflict(self, schema: OptionSchema) -> None:
        """空のセクション名は例外ではなく失敗結果として返る。"""
        outcome = compile_configuration(
            [make_fragment(settings={"": {"a": "b"}})], schema
        )
        assert isinstance(outcome, CompileFailure)
        assert outcome.failures[0].kind == "type-conflict"

    def test_assertion_failure(self, schema: OptionSchema) -> None:
        outcome = compile_configuration(
            [make_fragment(enable=True, nsswins=True, winbindd={"enable": False})],
            schema,
        )
        assert isinstance(outcome, CompileFailure)
        assert [f.kind for f in outcome.failures] == ["assertion"]

    def test_failure_logged_at_warning(
        self, schema: OptionSchema, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="sambacompose.core._compiler"):
            compile_configuration([make_fragment(enabel=True)], schema)
        assert "Compilation failed with UnknownOptionError" in caplog.text

    def test_run_pipeline_raises(self, schema: OptionSchema) -> None:
        with pytest.raises(AssertionFailure):
            run_pipeline([make_fragment(nsswins=True, winbindd={"enable": False})], schema)
