"""設定リゾルバー。

ユーザー設定 < pyproject.toml [tool.sambacompose] < .sambacompose/config.toml
< CLI オプション の順に上書きし、SambaComposeConfig を構築する。
"""

from __future__ import annotations

from pathlib import Path

from sambacompose.config._loader import load_pyproject_config, load_toml_config
from sambacompose.config._locator import (
    find_config_file,
    find_pyproject_toml,
    get_user_config_path,
)
from sambacompose.models.config import SambaComposeConfig

_FLAGS_KEY: str = "flags"


def merge_config_layers(
    *layers: dict[str, object] | None,
) -> dict[str, object]:
    """複数の設定レイヤーを項目単位でマージする。

    後のレイヤーが先のレイヤーを上書きする。flags セクションはフラグ名単位で
    マージする。None のレイヤーはスキップされる。

    Args:
        layers: マージ対象の設定辞書。低優先度から高優先度の順。

    Raises:
        TypeError: flags が dict でない場合。
    """
    result: dict[str, object] = {}
    for layer in layers:
        if layer is None:
            continue
        for key, value in layer.items():
            if key == _FLAGS_KEY:
                if not isinstance(value, dict):
                    msg = f"'{_FLAGS_KEY}' must be a dict, got {type(value).__name__}"
                    raise TypeError(msg)
                existing = result.get(_FLAGS_KEY)
                merged = dict(existing) if isinstance(existing, dict) else {}
                merged.update(value)
                result[_FLAGS_KEY] = merged
            else:
                result[key] = value
    return result


def filter_cli_overrides(cli_options: dict[str, object]) -> dict[str, object]:
    """CLI オプション辞書から None 値（未指定）を除外する。"""
    return {k: v for k, v in cli_options.items() if v is not None}


def _load_optional(path: Path | None) -> dict[str, object] | None:
    if path is None:
        return None
    try:
        return load_toml_config(path)
    except FileNotFoundError:
        return None


def resolve_config(
    start_dir: Path | None = None,
    cli_overrides: dict[str, object] | None = None,
) -> SambaComposeConfig:
    """設定ソースを階層解決し SambaComposeConfig を構築する。

    存在しない設定ファイルはスキップする。全て存在しない場合は
    デフォルト値のみで構築する。

    Args:
        start_dir: 探索開始ディレクトリ。None の場合はカレントディレクトリ。
        cli_overrides: CLI オプションの辞書。None 値は未指定扱い。

    Raises:
        pydantic.ValidationError: マージ後の設定が不正な場合。
        tomllib.TOMLDecodeError: 設定ファイルの TOML 構文が不正な場合。
        UnicodeDecodeError: 設定ファイルが UTF-8 として読めない場合。
        PermissionError: 設定ファイルの読み取り権限がない場合。
    """
    effective_start = start_dir if start_dir is not None else Path.cwd()

    user_layer = _load_optional(get_user_config_path())

    pyproject_layer: dict[str, object] | None = None
    pyproject_path = find_pyproject_toml(effective_start)
    if pyproject_path is not None:
        pyproject_layer = load_pyproject_config(pyproject_path)

    # .sambacompose/ はあるが config.toml が未作成のケースもある
    project_layer = _load_optional(find_config_file(effective_start))

    cli_layer: dict[str, object] | None = None
    if cli_overrides is not None:
        cli_layer = filter_cli_overrides(cli_overrides)

    merged = merge_config_layers(user_layer, pyproject_layer, project_layer, cli_layer)
    return SambaComposeConfig.model_validate(merged)
