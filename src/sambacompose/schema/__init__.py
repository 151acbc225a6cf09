"""オプションスキーマパッケージ。"""

from sambacompose.schema._samba import (
    DAEMON_NAMES,
    ENABLE_PATH,
    NSSWINS_PATH,
    OPEN_FIREWALL_PATH,
    PACKAGE_PATH,
    SAMBA_PREFIX,
    SETTINGS_PATH,
    build_samba_schema,
    daemon_enable_path,
    daemon_extra_args_path,
    samba_options,
)
from sambacompose.schema._schema import OptionSchema

__all__ = [
    "DAEMON_NAMES",
    "ENABLE_PATH",
    "NSSWINS_PATH",
    "OPEN_FIREWALL_PATH",
    "OptionSchema",
    "PACKAGE_PATH",
    "SAMBA_PREFIX",
    "SETTINGS_PATH",
    "build_samba_schema",
    "daemon_enable_path",
    "daemon_extra_args_path",
    "samba_options",
]
