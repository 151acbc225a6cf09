"""アーティファクト合成。

検証済みの解決済み設定から ArtifactBundle を組み立てる。
全ての生成処理は解決済み設定の純粋関数で、I/O を行わない。
"""

from __future__ import annotations

from typing import Final

from sambacompose.core._document import build_config_document
from sambacompose.core._units import (
    NETWORK_ONLINE_TARGET,
    NETWORK_TARGET,
    SAMBA_SLICE,
    SAMBA_TARGET,
    build_service_units,
    nss_modules,
)
from sambacompose.models.artifacts import (
    ArtifactBundle,
    FirewallPorts,
    NssSettings,
    SliceUnit,
    TargetUnit,
)
from sambacompose.models.resolved import ResolvedConfig
from sambacompose.schema import ENABLE_PATH, OPEN_FIREWALL_PATH

MULTI_USER_TARGET: Final[str] = "multi-user.target"

TMPFILES_DIRECTORIES: Final[tuple[str, ...]] = (
    "/var/lock/samba",
    "/var/log/samba",
    "/var/cache/samba",
    "/var/lib/samba/private",
)

SMB_TCP_PORTS: Final[tuple[int, ...]] = (139, 445)
NETBIOS_UDP_PORTS: Final[tuple[int, ...]] = (137, 138)

WINS_HOSTS_DATABASE: Final[str] = "wins"


def build_artifacts(config: ResolvedConfig) -> ArtifactBundle:
    """解決済み設定から全アーティファクトを合成する。

    services.samba.enable が偽の場合、ドキュメント以外は空になる。

    Raises:
        TypeConflictError: 設定ツリーが INI として表現できない場合。
    """
    document = build_config_document(config)
    if not config.get_bool(ENABLE_PATH):
        return ArtifactBundle(service_enabled=False, document=document)

    firewall = FirewallPorts()
    if config.get_bool(OPEN_FIREWALL_PATH):
        firewall = FirewallPorts(tcp=SMB_TCP_PORTS, udp=NETBIOS_UDP_PORTS)

    nss = NssSettings()
    modules = nss_modules(config)
    if modules:
        nss = NssSettings(modules=modules, hosts=(WINS_HOSTS_DATABASE,))

    return ArtifactBundle(
        service_enabled=True,
        document=document,
        units=build_service_units(config, document),
        target=TargetUnit(
            name=SAMBA_TARGET,
            description="Samba Server",
            depends_on=(NETWORK_TARGET,),
            wants=(NETWORK_ONLINE_TARGET,),
            wanted_by=(MULTI_USER_TARGET,),
        ),
        slice=SliceUnit(name=SAMBA_SLICE, description="Samba slice"),
        tmpfiles_rules=tuple(f"d {d} - - - - -" for d in TMPFILES_DIRECTORIES),
        firewall=firewall,
        nss=nss,
    )
