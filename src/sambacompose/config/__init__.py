"""設定管理モジュール。"""

from sambacompose.config._locator import find_project_root
from sambacompose.config._resolver import (
    filter_cli_overrides,
    merge_config_layers,
    resolve_config,
)

__all__ = [
    "filter_cli_overrides",
    "find_project_root",
    "merge_config_layers",
    "resolve_config",
]
