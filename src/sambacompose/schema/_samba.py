"""Samba サービスのオプション定義。

全オプションは services.samba 配下に置かれる。
旧オプションは改名・削除として宣言し、移行レイヤーが参照を書き換える。
"""

from __future__ import annotations

from functools import cache
from typing import Final

from sambacompose.models.option import MigrationStatus, Option, OptionPath, OptionType
from sambacompose.models.value import ListValue, MapValue, ScalarValue
from sambacompose.schema._schema import OptionSchema

SAMBA_PREFIX: Final[OptionPath] = ("services", "samba")

ENABLE_PATH: Final[OptionPath] = (*SAMBA_PREFIX, "enable")
PACKAGE_PATH: Final[OptionPath] = (*SAMBA_PREFIX, "package")
OPEN_FIREWALL_PATH: Final[OptionPath] = (*SAMBA_PREFIX, "openFirewall")
NSSWINS_PATH: Final[OptionPath] = (*SAMBA_PREFIX, "nsswins")
SETTINGS_PATH: Final[OptionPath] = (*SAMBA_PREFIX, "settings")

DAEMON_NAMES: Final[tuple[str, ...]] = ("smbd", "nmbd", "winbindd")

DEFAULT_PACKAGE_PREFIX: Final[str] = "/usr"

_CONFIG_TEXT_REMOVAL: Final[str] = """\
Use services.samba.settings instead.

This is part of the general move to use structured settings instead of raw
text for config as introduced by RFC0042:
https://github.com/NixOS/rfcs/blob/master/rfcs/0042-config-option.md"""

_DAEMON_DESCRIPTIONS: Final[dict[str, str]] = {
    "smbd": "Whether to enable Samba's smbd daemon.",
    "nmbd": (
        "Whether to enable Samba's nmbd, which replies to NetBIOS over IP name "
        "service requests. It also participates in the browsing protocols "
        'which make up the Windows "Network Neighborhood" view.'
    ),
    "winbindd": (
        "Whether to enable Samba's winbindd, which provides a number of services "
        "to the Name Service Switch capability found in most modern C libraries, "
        "to arbitrary applications via PAM and ntlm_auth and to Samba itself."
    ),
}


def daemon_enable_path(daemon: str) -> OptionPath:
    return (*SAMBA_PREFIX, daemon, "enable")


def daemon_extra_args_path(daemon: str) -> OptionPath:
    return (*SAMBA_PREFIX, daemon, "extraArgs")


def _active(
    path: OptionPath,
    option_type: OptionType,
    default: ScalarValue | ListValue | MapValue,
    description: str,
) -> Option:
    return Option(path=path, type=option_type, default=default, description=description)


def _renamed(old: str, new: OptionPath) -> Option:
    return Option(
        path=(*SAMBA_PREFIX, old),
        status=MigrationStatus.RENAMED,
        renamed_to=new,
    )


def _removed(old: str, message: str) -> Option:
    return Option(
        path=(*SAMBA_PREFIX, old),
        status=MigrationStatus.REMOVED,
        removal_message=message,
    )


def samba_options() -> list[Option]:
    """Samba モジュールが宣言する全オプションを返す。"""
    options: list[Option] = [
        _active(
            ENABLE_PATH,
            OptionType.BOOL,
            ScalarValue(value=False),
            "Whether to enable Samba, the SMB/CIFS protocol.",
        ),
        _active(
            PACKAGE_PATH,
            OptionType.STR,
            ScalarValue(value=DEFAULT_PACKAGE_PREFIX),
            "Installation prefix of the Samba suite. "
            "Daemons are started from <package>/sbin.",
        ),
        _active(
            OPEN_FIREWALL_PATH,
            OptionType.BOOL,
            ScalarValue(value=False),
            "Whether to open the default ports in the firewall for Samba.",
        ),
        _active(
            NSSWINS_PATH,
            OptionType.BOOL,
            ScalarValue(value=False),
            "Whether to enable the WINS NSS (Name Service Switch) plug-in. "
            "Enabling it allows applications to resolve WINS/NetBIOS names "
            "(a.k.a. Windows machine names) by transparently querying the "
            "winbindd daemon.",
        ),
        _active(
            SETTINGS_PATH,
            OptionType.ATTRS,
            MapValue(),
            "Configuration file for the Samba suite in ini format. "
            "This file is located in /etc/samba/smb.conf.",
        ),
    ]
    for daemon in DAEMON_NAMES:
        options.append(
            _active(
                daemon_enable_path(daemon),
                OptionType.BOOL,
                ScalarValue(value=True),
                _DAEMON_DESCRIPTIONS[daemon],
            )
        )
        options.append(
            _active(
                daemon_extra_args_path(daemon),
                OptionType.LIST_OF_STR,
                ListValue(),
                f"Extra arguments to pass to the {daemon} service.",
            )
        )

    options.extend(
        [
            _removed("defaultShare", ""),
            _removed(
                "syncPasswordsByPam",
                "This option has been removed by upstream, see "
                "https://bugzilla.samba.org/show_bug.cgi?id=10669#c10",
            ),
            _removed("configText", _CONFIG_TEXT_REMOVAL),
            _removed("extraConfig", "Use services.samba.settings instead."),
            _renamed("invalidUsers", (*SETTINGS_PATH, "global", "invalid users")),
            _renamed("securityType", (*SETTINGS_PATH, "global", "security")),
            _renamed("shares", SETTINGS_PATH),
            _renamed("enableWinbindd", daemon_enable_path("winbindd")),
            _renamed("enableNmbd", daemon_enable_path("nmbd")),
        ]
    )
    return options


@cache
def build_samba_schema() -> OptionSchema:
    """Samba のオプションスキーマを構築する。

    結果はキャッシュされ、同一プロセス内では常に同じインスタンスを返す。

    Raises:
        SchemaConflictError: オプション宣言に矛盾がある場合。
    """
    return OptionSchema(samba_options())
