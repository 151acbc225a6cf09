"""フラグメントマージエンジンのテスト。

型ごとの結合規則、条件付きフラグメントの扱い、上書き記録を検証する。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

import pytest

from sambacompose.core import MERGE_POLICY, deep_merge, merge_fragments, normalize_fragments
from sambacompose.core._merge import MergeResult
from sambacompose.errors import TypeConflictError
from sambacompose.models.fragment import Fragment
from sambacompose.models.option import OptionType
from sambacompose.models.result import OverrideNotice
from sambacompose.models.value import MapValue, from_python, to_python
from sambacompose.schema import (
    ENABLE_PATH,
    OPEN_FIREWALL_PATH,
    PACKAGE_PATH,
    SETTINGS_PATH,
    OptionSchema,
    daemon_extra_args_path,
)
from tests.unit.core.conftest import make_fragment


def _merge(
    schema: OptionSchema,
    fragments: Sequence[Fragment],
    flags: Mapping[str, bool] | None = None,
) -> MergeResult:
    return merge_fragments(schema, normalize_fragments(schema, fragments), flags)


def _settings(result: MergeResult) -> object:
    return to_python(result.config.get_map(SETTINGS_PATH))


class TestMergePolicy:
    """結合規則の対応表を検証。"""

    def test_covers_every_option_type(self) -> None:
        assert set(MERGE_POLICY) == set(OptionType)


class TestDefaults:
    """割り当てのないオプションのデフォルト値を検証。"""

    def test_no_fragments(self, schema: OptionSchema) -> None:
        result = _merge(schema, [])
        assert result.config.get_bool(ENABLE_PATH) is False
        assert result.config.get_str(PACKAGE_PATH) == "/usr"
        assert result.config.get_map(SETTINGS_PATH) == MapValue()
        assert result.overrides == ()

    def test_every_active_option_resolved(self, schema: OptionSchema) -> None:
        result = _merge(schema, [make_fragment(enable=True)])
        assert set(result.config.values) == set(schema.defaults())


class TestScalarLastWins:
    """bool / str の後勝ちと上書き記録を検証。"""

    def test_last_fragment_wins(self, schema: OptionSchema) -> None:
        result = _merge(
            schema,
            [
                make_fragment(source="a", package="/opt/a"),
                make_fragment(source="b", package="/opt/b"),
            ],
        )
        assert result.config.get_str(PACKAGE_PATH) == "/opt/b"
        assert result.overrides == (
            OverrideNotice(path=PACKAGE_PATH, overridden_source="a", winning_source="b"),
        )

    def test_same_value_is_not_an_override(self, schema: OptionSchema) -> None:
        result = _merge(
            schema,
            [make_fragment(source="a", enable=True), make_fragment(source="b", enable=True)],
        )
        assert result.overrides == ()

    def test_override_logged_at_debug(
        self, schema: OptionSchema, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="sambacompose.core._merge"):
            _merge(
                schema,
                [make_fragment(source="a", enable=True), make_fragment(source="b", enable=False)],
            )
        assert "is overridden by 'b'" in caplog.text

    def test_wrong_type_rejected(self, schema: OptionSchema) -> None:
        with pytest.raises(TypeConflictError, match="is not of type 'bool'"):
            _merge(schema, [make_fragment(enable="yes")])

    def test_integer_is_not_bool(self, schema: OptionSchema) -> None:
        with pytest.raises(TypeConflictError):
            _merge(schema, [make_fragment(enable=1)])


class TestListConcatenation:
    """list-of-str の連結を検証。"""

    def test_declaration_order_and_duplicates_preserved(self, schema: OptionSchema) -> None:
        """ソートも重複除去もしない。"""
        result = _merge(
            schema,
            [
                make_fragment(smbd={"extraArgs": ["--debuglevel=3", "-S"]}),
                make_fragment(smbd={"extraArgs": ["-S"]}),
            ],
        )
        assert result.config.get_str_list(daemon_extra_args_path("smbd")) == (
            "--debuglevel=3",
            "-S",
            "-S",
        )
        assert result.overrides == ()

    def test_non_string_items_rejected(self, schema: OptionSchema) -> None:
        with pytest.raises(TypeConflictError, match="list-of-str"):
            _merge(schema, [make_fragment(smbd={"extraArgs": [1]})])


class TestAttrsDeepMerge:
    """attrs の右優先ディープマージを検証。"""

    def test_right_biased(self, schema: OptionSchema) -> None:
        result = _merge(
            schema,
            [
                make_fragment(settings={"a": {"x": 1}}),
                make_fragment(settings={"a": {"x": 2, "y": 3}}),
            ],
        )
        assert _settings(result) == {"a": {"x": 2, "y": 3}}

    def test_keys_from_both_sides_kept(self, schema: OptionSchema) -> None:
        result = _merge(
            schema,
            [
                make_fragment(settings={"global": {"workgroup": "WG"}}),
                make_fragment(settings={"public": {"path": "/srv"}}),
                make_fragment(settings={"global": {"security": "user"}}),
            ],
        )
        assert _settings(result) == {
            "global": {"workgroup": "WG", "security": "user"},
            "public": {"path": "/srv"},
        }

    def test_renamed_option_merges_into_settings(self, schema: OptionSchema) -> None:
        result = _merge(
            schema,
            [
                make_fragment(settings={"global": {"workgroup": "WG"}}),
                make_fragment(securityType="user", invalidUsers=["root"]),
            ],
        )
        assert _settings(result) == {
            "global": {"workgroup": "WG", "security": "user", "invalid users": ["root"]},
        }

    def test_map_vs_scalar_conflict(self, schema: OptionSchema) -> None:
        with pytest.raises(TypeConflictError, match="Cannot merge str into map"):
            _merge(
                schema,
                [
                    make_fragment(settings={"global": {"security": "user"}}),
                    make_fragment(settings={"global": "oops"}),
                ],
            )

    def test_settings_must_be_map(self, schema: OptionSchema) -> None:
        with pytest.raises(TypeConflictError, match="attrs"):
            _merge(schema, [make_fragment(settings=["global"])])


class TestDeepMerge:
    """deep_merge 単体の動作を検証。"""

    def test_arbitrary_depth(self) -> None:
        base = from_python({"a": {"b": {"c": 1, "d": 2}}})
        override = from_python({"a": {"b": {"c": 3}}})
        assert isinstance(base, MapValue) and isinstance(override, MapValue)
        assert to_python(deep_merge(base, override)) == {"a": {"b": {"c": 3, "d": 2}}}

    def test_scalar_vs_map_conflict_reports_path(self) -> None:
        base = from_python({"a": {"b": 1}})
        override = from_python({"a": {"b": {"c": 2}}})
        assert isinstance(base, MapValue) and isinstance(override, MapValue)
        with pytest.raises(TypeConflictError, match="'a.b'"):
            deep_merge(base, override)

    def test_lists_inside_maps_replaced(self) -> None:
        base = from_python({"a": ["x"]})
        override = from_python({"a": ["y"]})
        assert isinstance(base, MapValue) and isinstance(override, MapValue)
        assert to_python(deep_merge(base, override)) == {"a": ["y"]}


class TestConditionalFragments:
    """条件付きフラグメントの扱いを検証。"""

    def test_false_fragment_leaves_no_trace(self, schema: OptionSchema) -> None:
        base = [make_fragment(source="a", package="/opt/a")]
        disabled = make_fragment(
            source="off",
            condition={"flag": "off"},
            package="/opt/off",
            settings={"global": {"security": "ads"}},
            smbd={"extraArgs": ["-x"]},
        )
        without = _merge(schema, base)
        with_disabled = _merge(schema, [*base, disabled])
        assert with_disabled == without

    def test_false_fragment_not_type_checked(self, schema: OptionSchema) -> None:
        result = _merge(schema, [make_fragment(condition={"flag": "off"}, enable="yes")])
        assert result.config.get_bool(ENABLE_PATH) is False

    def test_flag_enables_fragment(self, schema: OptionSchema) -> None:
        fragment = make_fragment(condition={"flag": "fileserver"}, enable=True)
        assert _merge(schema, [fragment], {"fileserver": True}).config.get_bool(ENABLE_PATH)
        assert not _merge(schema, [fragment], {"fileserver": False}).config.get_bool(
            ENABLE_PATH
        )
        assert not _merge(schema, [fragment]).config.get_bool(ENABLE_PATH)

    def test_option_condition_sees_earlier_fragments(self, schema: OptionSchema) -> None:
        enable = make_fragment(enable=True)
        firewall = make_fragment(
            condition={"option": ["services", "samba", "enable"]}, openFirewall=True
        )
        assert _merge(schema, [enable, firewall]).config.get_bool(OPEN_FIREWALL_PATH)
        assert not _merge(schema, [firewall, enable]).config.get_bool(OPEN_FIREWALL_PATH)

    def test_option_condition_inside_settings(self, schema: OptionSchema) -> None:
        ads = make_fragment(settings={"global": {"security": "ads"}})
        winbind = make_fragment(
            condition={
                "option": ["services", "samba", "settings", "global", "security"],
                "equals": "ads",
            },
            winbindd={"extraArgs": ["--offline-logon"]},
        )
        result = _merge(schema, [ads, winbind])
        assert result.config.get_str_list(daemon_extra_args_path("winbindd")) == (
            "--offline-logon",
        )

    def test_composite_conditions(self, schema: OptionSchema) -> None:
        fragment = make_fragment(
            condition={"all": [{"flag": "a"}, {"not": {"flag": "b"}}]}, enable=True
        )
        assert _merge(schema, [fragment], {"a": True}).config.get_bool(ENABLE_PATH)
        assert not _merge(schema, [fragment], {"a": True, "b": True}).config.get_bool(
            ENABLE_PATH
        )

    def test_skip_logged_at_debug(
        self, schema: OptionSchema, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="sambacompose.core._merge"):
            _merge(schema, [make_fragment(source="off.toml#1", condition={"flag": "x"})])
        assert "Skipping fragment 'off.toml#1'" in caplog.text
