"""合成アーティファクトのモデル。

ConfigDocument（smb.conf の構造化表現）、ServiceUnit（デーモンのユニット記述）、
およびそれらをまとめた ArtifactBundle を定義する。
ファイルへの書き出しやユニットの登録は外部の協調者が担当する。
"""

from __future__ import annotations

import hashlib
import shlex
from typing import Final, Literal

from pydantic import Field, StrictBool, StrictFloat, StrictInt, StrictStr

from sambacompose.models._base import SambaComposeBaseModel

SMB_CONF_PATH: Final[str] = "/etc/samba/smb.conf"

IniAtom = StrictStr | StrictBool | StrictInt | StrictFloat


def format_ini_atom(value: str | bool | int | float) -> str:
    """INI の値文字列に変換する。真偽値は true/false。"""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class IniSection(SambaComposeBaseModel):
    """INI の1セクション。entries はキー順にソート済みで格納される。"""

    name: str = Field(min_length=1)
    entries: tuple[tuple[str, IniAtom], ...] = ()


class ConfigDocument(SambaComposeBaseModel):
    """生成された設定ドキュメント。

    セクションとキーはソート済みで保持されるため、同一入力からは
    常にバイト単位で同一の render() 結果が得られる。

    Attributes:
        path: デーモンが読み込む設定ファイルのパス。
        sections: セクション名順の INI セクション。
    """

    path: str = SMB_CONF_PATH
    sections: tuple[IniSection, ...] = ()

    def render(self) -> str:
        blocks: list[str] = []
        for section in self.sections:
            lines = [f"[{section.name}]"]
            lines.extend(
                f"{key}={format_ini_atom(value)}" for key, value in section.entries
            )
            blocks.append("\n".join(lines) + "\n")
        return "\n".join(blocks)

    @property
    def fingerprint(self) -> str:
        """render() 結果の SHA-256 16進ダイジェスト。"""
        return hashlib.sha256(self.render().encode("utf-8")).hexdigest()


class ServiceUnit(SambaComposeBaseModel):
    """有効なデーモンロール1つ分のサービスユニット記述。

    Attributes:
        name: ユニット名（例: samba-smbd.service）。
        enabled: 有効フラグ。無効なロールはユニット自体が生成されないため常に True。
        description: ユニットの説明。
        documentation: 参照マニュアルページ。
        depends_on: 起動順序上の先行ユニット（after）。
        wants: 弱い依存ユニット。
        wanted_by: このユニットを要求するターゲット。
        part_of: 停止・再起動を連動させるターゲット。
        exec_path: 実行ファイルのパス。
        exec_args: 実行引数（基本引数 + 追加引数、順序保持）。
        exec_reload: リロード時のコマンド。
        restart_trigger: 設定ドキュメントのフィンガープリント。変化すると再起動が必要。
        resource_limits: リソース制限（LimitCORE 等）。
        environment: 環境変数。nsswins 有効時は NSS モジュールのライブラリパスを含む。
        pid_file_path: PID ファイルのパス。
        service_type: サービス種別。
        slice: 所属スライス。
        requires_mounts_for: 起動前にマウントが必要なパス。
    """

    name: str = Field(min_length=1)
    enabled: Literal[True] = True
    description: str
    documentation: tuple[str, ...] = ()
    depends_on: tuple[str, ...] = ()
    wants: tuple[str, ...] = ()
    wanted_by: tuple[str, ...] = ()
    part_of: tuple[str, ...] = ()
    exec_path: str = Field(min_length=1)
    exec_args: tuple[str, ...] = ()
    exec_reload: str | None = None
    restart_trigger: str = Field(min_length=1)
    resource_limits: dict[str, str] = Field(default_factory=dict)
    environment: dict[str, str] = Field(default_factory=dict)
    pid_file_path: str
    service_type: str = "notify"
    slice: str | None = None
    requires_mounts_for: tuple[str, ...] = ()

    @property
    def exec_start(self) -> str:
        """exec_path と exec_args をシェルエスケープして連結したコマンドライン。"""
        return shlex.join([self.exec_path, *self.exec_args])


class TargetUnit(SambaComposeBaseModel):
    """デーモン群をまとめるターゲットユニット。"""

    name: str = Field(min_length=1)
    description: str
    depends_on: tuple[str, ...] = ()
    wants: tuple[str, ...] = ()
    wanted_by: tuple[str, ...] = ()


class SliceUnit(SambaComposeBaseModel):
    """デーモン群を収容するスライス。"""

    name: str = Field(min_length=1)
    description: str


class FirewallPorts(SambaComposeBaseModel):
    """開放を要求するポート。適用はファイアウォール側の責務。"""

    tcp: tuple[int, ...] = ()
    udp: tuple[int, ...] = ()


class NssSettings(SambaComposeBaseModel):
    """Name Service Switch への追加要求。"""

    modules: tuple[str, ...] = ()
    hosts: tuple[str, ...] = ()


class ArtifactBundle(SambaComposeBaseModel):
    """1回のコンパイルで合成される全アーティファクト。

    service_enabled が False の場合、ユニット・ターゲット・スライス等は空になる。
    ドキュメントは常に生成されるが、書き出すかどうかは service_enabled に従う。
    """

    service_enabled: StrictBool
    document: ConfigDocument
    units: tuple[ServiceUnit, ...] = ()
    target: TargetUnit | None = None
    slice: SliceUnit | None = None
    tmpfiles_rules: tuple[str, ...] = ()
    firewall: FirewallPorts = Field(default_factory=FirewallPorts)
    nss: NssSettings = Field(default_factory=NssSettings)

    def unit(self, name: str) -> ServiceUnit | None:
        return next((u for u in self.units if u.name == name), None)
