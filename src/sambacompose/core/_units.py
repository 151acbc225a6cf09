"""サービスグラフ生成。

3つのデーモンロール（nmbd: 名前解決、smbd: ファイル共有本体、
winbindd: ID 連携）について、有効なロールだけのユニット記述を生成する。
ロール間の順序は固定の半順序で、循環は構成上起こらない。
"""

from __future__ import annotations

from typing import Final

from pydantic import Field

from sambacompose.models._base import SambaComposeBaseModel
from sambacompose.models.artifacts import ConfigDocument, ServiceUnit
from sambacompose.models.resolved import ResolvedConfig
from sambacompose.schema import (
    ENABLE_PATH,
    NSSWINS_PATH,
    PACKAGE_PATH,
    daemon_enable_path,
    daemon_extra_args_path,
)

NETWORK_TARGET: Final[str] = "network.target"
NETWORK_ONLINE_TARGET: Final[str] = "network-online.target"
SAMBA_TARGET: Final[str] = "samba.target"
SAMBA_SLICE: Final[str] = "system-samba.slice"

BASE_EXEC_ARGS: Final[tuple[str, ...]] = ("--foreground", "--no-process-group")
STATE_DIRECTORY: Final[str] = "/var/lib/samba"
PID_DIRECTORY: Final[str] = "/run/samba"
EXEC_RELOAD: Final[str] = "kill -HUP $MAINPID"


class DaemonRole(SambaComposeBaseModel):
    """デーモンロールの固定定義。

    Attributes:
        daemon: デーモン名。オプションパスと実行ファイル名に使われる。
        description: ユニットの説明。
        needs_online: network-online.target の後に起動し、それを wants に含めるか。
        after_roles: 有効であれば先に起動させるロール名。
        resource_limits: ロール固有のリソース制限。
    """

    daemon: str = Field(min_length=1)
    description: str
    needs_online: bool = True
    after_roles: tuple[str, ...] = ()
    resource_limits: dict[str, str] = Field(default_factory=dict)

    @property
    def unit_name(self) -> str:
        return service_unit_name(self.daemon)


def service_unit_name(daemon: str) -> str:
    return f"samba-{daemon}.service"


ROLES: Final[tuple[DaemonRole, ...]] = (
    DaemonRole(
        daemon="nmbd",
        description="Samba NMB Daemon",
        resource_limits={"LimitCORE": "infinity"},
    ),
    DaemonRole(
        daemon="smbd",
        description="Samba SMB Daemon",
        after_roles=("nmbd", "winbindd"),
        resource_limits={"LimitCORE": "infinity", "LimitNOFILE": "16384"},
    ),
    DaemonRole(
        daemon="winbindd",
        description="Samba Winbind Daemon",
        needs_online=False,
        after_roles=("nmbd",),
        resource_limits={"LimitCORE": "infinity"},
    ),
)
"""ユニットの出力順。"""


def nss_modules(config: ResolvedConfig) -> tuple[str, ...]:
    """NSS に登録するモジュールのインストールプレフィックス。nsswins が偽なら空。"""
    if not config.get_bool(NSSWINS_PATH):
        return ()
    return (config.get_str(PACKAGE_PATH),)


def nss_library_path(modules: tuple[str, ...]) -> str:
    """NSS モジュールのライブラリ検索パス（各プレフィックスの lib を : 区切り）。"""
    return ":".join(f"{m.rstrip('/')}/lib" for m in modules)


def enabled_roles(config: ResolvedConfig) -> tuple[DaemonRole, ...]:
    """有効なロールを返す。サービス全体が無効なら空。"""
    if not config.get_bool(ENABLE_PATH):
        return ()
    return tuple(r for r in ROLES if config.get_bool(daemon_enable_path(r.daemon)))


def _build_unit(
    role: DaemonRole,
    config: ResolvedConfig,
    enabled: frozenset[str],
    restart_trigger: str,
) -> ServiceUnit:
    after = [NETWORK_TARGET]
    wants: list[str] = []
    if role.needs_online:
        after.append(NETWORK_ONLINE_TARGET)
        wants.append(NETWORK_ONLINE_TARGET)
    after.extend(service_unit_name(dep) for dep in role.after_roles if dep in enabled)

    package = config.get_str(PACKAGE_PATH).rstrip("/")
    extra_args = config.get_str_list(daemon_extra_args_path(role.daemon))
    environment: dict[str, str] = {}
    modules = nss_modules(config)
    if modules:
        environment["LD_LIBRARY_PATH"] = nss_library_path(modules)
    return ServiceUnit(
        name=role.unit_name,
        description=role.description,
        documentation=(f"man:{role.daemon}(8)", "man:samba(7)", "man:smb.conf(5)"),
        depends_on=tuple(after),
        wants=tuple(wants),
        wanted_by=(SAMBA_TARGET,),
        part_of=(SAMBA_TARGET,),
        exec_path=f"{package}/sbin/{role.daemon}",
        exec_args=(*BASE_EXEC_ARGS, *extra_args),
        exec_reload=EXEC_RELOAD,
        restart_trigger=restart_trigger,
        resource_limits=dict(role.resource_limits),
        environment=environment,
        pid_file_path=f"{PID_DIRECTORY}/{role.daemon}.pid",
        slice=SAMBA_SLICE,
        requires_mounts_for=(STATE_DIRECTORY,),
    )


def build_service_units(
    config: ResolvedConfig,
    document: ConfigDocument,
) -> tuple[ServiceUnit, ...]:
    """有効なロールのユニット記述を生成する。

    無効なロールは出力に含まれず、他のユニットの依存関係にも現れない。
    全ユニットの restart_trigger は document のフィンガープリント。
    """
    roles = enabled_roles(config)
    enabled = frozenset(r.daemon for r in roles)
    trigger = document.fingerprint
    return tuple(_build_unit(role, config, enabled, trigger) for role in roles)
