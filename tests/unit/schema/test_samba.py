"""Samba オプション定義のテスト。"""

from sambacompose.models.option import MigrationStatus, OptionType
from sambacompose.models.value import ListValue, MapValue, ScalarValue
from sambacompose.schema import (
    DAEMON_NAMES,
    ENABLE_PATH,
    PACKAGE_PATH,
    SETTINGS_PATH,
    build_samba_schema,
    daemon_enable_path,
    daemon_extra_args_path,
)


class TestBuildSambaSchema:
    """スキーマ構築を検証。"""

    def test_is_cached(self) -> None:
        assert build_samba_schema() is build_samba_schema()

    def test_enable_defaults_false(self) -> None:
        option = build_samba_schema().lookup(ENABLE_PATH)
        assert option is not None
        assert option.default == ScalarValue(value=False)

    def test_package_default_prefix(self) -> None:
        option = build_samba_schema().lookup(PACKAGE_PATH)
        assert option is not None
        assert option.default == ScalarValue(value="/usr")

    def test_settings_is_attrs(self) -> None:
        option = build_samba_schema().lookup(SETTINGS_PATH)
        assert option is not None
        assert option.type is OptionType.ATTRS
        assert option.default == MapValue()

    def test_daemon_options(self) -> None:
        schema = build_samba_schema()
        for daemon in DAEMON_NAMES:
            enable = schema.lookup(daemon_enable_path(daemon))
            extra = schema.lookup(daemon_extra_args_path(daemon))
            assert enable is not None and enable.default == ScalarValue(value=True)
            assert extra is not None and extra.default == ListValue()


class TestSambaMigrations:
    """改名・削除オプションの宣言を検証。"""

    def test_removed_options(self) -> None:
        schema = build_samba_schema()
        for name in ("defaultShare", "syncPasswordsByPam", "configText", "extraConfig"):
            option = schema.lookup(("services", "samba", name))
            assert option is not None
            assert option.status is MigrationStatus.REMOVED

    def test_extra_config_message(self) -> None:
        option = build_samba_schema().lookup(("services", "samba", "extraConfig"))
        assert option is not None
        assert option.removal_message == "Use services.samba.settings instead."

    def test_invalid_users_renamed_into_settings(self) -> None:
        option = build_samba_schema().lookup(("services", "samba", "invalidUsers"))
        assert option is not None
        assert option.status is MigrationStatus.RENAMED
        assert option.renamed_to == (*SETTINGS_PATH, "global", "invalid users")

    def test_enable_nmbd_renamed(self) -> None:
        option = build_samba_schema().lookup(("services", "samba", "enableNmbd"))
        assert option is not None
        assert option.renamed_to == daemon_enable_path("nmbd")
