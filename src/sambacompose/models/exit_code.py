"""ExitCode — 終了コードの定義。"""

from enum import IntEnum


class ExitCode(IntEnum):
    """プロセス終了コード。

    1 はコンパイル失敗（移行・マージ・アサーションのいずれか）、
    4 は CLI 層固有の入力エラー（ソース読み込み失敗・設定不正など）。
    """

    SUCCESS = 0
    COMPILATION_FAILED = 1
    INPUT_ERROR = 4
