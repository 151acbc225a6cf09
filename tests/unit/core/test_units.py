"""サービスグラフ生成のテスト。

ロールの有効化、依存順序、実行引数、再起動トリガーを検証する。
"""

from __future__ import annotations

import pytest

from sambacompose.core import (
    build_config_document,
    build_service_units,
    merge_fragments,
    normalize_fragments,
)
from sambacompose.models.artifacts import ServiceUnit
from sambacompose.models.resolved import ResolvedConfig
from sambacompose.schema import OptionSchema
from tests.unit.core.conftest import make_fragment

NMBD = "samba-nmbd.service"
SMBD = "samba-smbd.service"
WINBINDD = "samba-winbindd.service"


def _resolve(schema: OptionSchema, **options: object) -> ResolvedConfig:
    fragments = [make_fragment(**options)]
    return merge_fragments(schema, normalize_fragments(schema, fragments)).config


def _units(schema: OptionSchema, **options: object) -> dict[str, ServiceUnit]:
    config = _resolve(schema, **options)
    units = build_service_units(config, build_config_document(config))
    return {unit.name: unit for unit in units}


class TestEnabledRoles:
    """ロールの有効化を検証。"""

    def test_service_disabled_emits_nothing(self, schema: OptionSchema) -> None:
        assert _units(schema) == {}

    def test_all_roles_by_default(self, schema: OptionSchema) -> None:
        config = _resolve(schema, enable=True)
        units = build_service_units(config, build_config_document(config))
        assert [u.name for u in units] == [NMBD, SMBD, WINBINDD]

    def test_disabled_role_omitted(self, schema: OptionSchema) -> None:
        units = _units(schema, enable=True, winbindd={"enable": False})
        assert set(units) == {NMBD, SMBD}
        assert all(unit.enabled for unit in units.values())


class TestDependencyOrdering:
    """ロール間の起動順序を検証。"""

    def test_full_graph(self, schema: OptionSchema) -> None:
        units = _units(schema, enable=True)
        assert units[NMBD].depends_on == ("network.target", "network-online.target")
        assert units[SMBD].depends_on == (
            "network.target",
            "network-online.target",
            NMBD,
            WINBINDD,
        )
        assert units[WINBINDD].depends_on == ("network.target", NMBD)

    def test_online_wants(self, schema: OptionSchema) -> None:
        units = _units(schema, enable=True)
        assert units[SMBD].wants == ("network-online.target",)
        assert units[WINBINDD].wants == ()

    def test_without_nmbd(self, schema: OptionSchema) -> None:
        units = _units(schema, enable=True, nmbd={"enable": False})
        assert units[SMBD].depends_on == (
            "network.target",
            "network-online.target",
            WINBINDD,
        )
        assert units[WINBINDD].depends_on == ("network.target",)

    @pytest.mark.parametrize(
        "roles",
        [
            {},
            {"nmbd": {"enable": False}},
            {"winbindd": {"enable": False}},
            {"nmbd": {"enable": False}, "winbindd": {"enable": False}},
        ],
    )
    def test_no_dangling_references(
        self, schema: OptionSchema, roles: dict[str, object]
    ) -> None:
        """ロール間の依存は出力されたユニット名と完全一致する。"""
        units = _units(schema, enable=True, **roles)
        for unit in units.values():
            for dep in unit.depends_on:
                if dep.startswith("samba-"):
                    assert dep in units

    def test_every_reference_has_unit_suffix(self, schema: OptionSchema) -> None:
        for unit in _units(schema, enable=True).values():
            assert unit.name.endswith(".service")
            for dep in (*unit.depends_on, *unit.wants, *unit.wanted_by, *unit.part_of):
                assert dep.endswith((".service", ".target"))

    def test_units_belong_to_target(self, schema: OptionSchema) -> None:
        for unit in _units(schema, enable=True).values():
            assert unit.wanted_by == ("samba.target",)
            assert unit.part_of == ("samba.target",)
            assert unit.slice == "system-samba.slice"


class TestExecution:
    """実行パスと引数を検証。"""

    def test_base_args_then_extra_args(self, schema: OptionSchema) -> None:
        units = _units(schema, enable=True, smbd={"extraArgs": ["--debuglevel=3", "-S"]})
        assert units[SMBD].exec_args == (
            "--foreground",
            "--no-process-group",
            "--debuglevel=3",
            "-S",
        )
        assert units[NMBD].exec_args == ("--foreground", "--no-process-group")

    def test_exec_path_from_package(self, schema: OptionSchema) -> None:
        units = _units(schema, enable=True, package="/opt/samba/")
        assert units[SMBD].exec_path == "/opt/samba/sbin/smbd"
        assert units[SMBD].exec_start.startswith("/opt/samba/sbin/smbd --foreground")

    def test_runtime_settings(self, schema: OptionSchema) -> None:
        smbd = _units(schema, enable=True)[SMBD]
        assert smbd.pid_file_path == "/run/samba/smbd.pid"
        assert smbd.service_type == "notify"
        assert smbd.exec_reload == "kill -HUP $MAINPID"
        assert smbd.resource_limits == {"LimitCORE": "infinity", "LimitNOFILE": "16384"}
        assert smbd.requires_mounts_for == ("/var/lib/samba",)


class TestEnvironment:
    """NSS モジュールのライブラリパスを検証。"""

    def test_no_environment_without_nsswins(self, schema: OptionSchema) -> None:
        for unit in _units(schema, enable=True).values():
            assert unit.environment == {}

    def test_nsswins_sets_library_path(self, schema: OptionSchema) -> None:
        units = _units(schema, enable=True, nsswins=True, package="/opt/samba/")
        assert set(units) == {NMBD, SMBD, WINBINDD}
        for unit in units.values():
            assert unit.environment == {"LD_LIBRARY_PATH": "/opt/samba/lib"}


class TestRestartTrigger:
    """再起動トリガーと設定ドキュメントの連動を検証。"""

    def test_trigger_is_document_fingerprint(self, schema: OptionSchema) -> None:
        config = _resolve(schema, enable=True, settings={"global": {"security": "user"}})
        document = build_config_document(config)
        for unit in build_service_units(config, document):
            assert unit.restart_trigger == document.fingerprint

    def test_trigger_changes_with_settings(self, schema: OptionSchema) -> None:
        before = _units(schema, enable=True, settings={"global": {"security": "user"}})
        after = _units(schema, enable=True, settings={"global": {"security": "ads"}})
        assert before[SMBD].restart_trigger != after[SMBD].restart_trigger

    def test_trigger_stable_for_same_settings(self, schema: OptionSchema) -> None:
        first = _units(schema, enable=True, settings={"global": {"a": "1", "b": "2"}})
        second = _units(schema, enable=True, settings={"global": {"b": "2", "a": "1"}})
        assert first[SMBD].restart_trigger == second[SMBD].restart_trigger
