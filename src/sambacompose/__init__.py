"""Samba 設定フラグメントの合成エンジン。"""


def main() -> None:
    """パッケージエントリポイント。cli.main() に委譲する。

    pyproject.toml の [project.scripts] は sambacompose.cli:main を直接参照するため、
    プログラムから sambacompose.main() として呼び出す場合の互換用。
    """
    from sambacompose.cli import main as cli_main

    cli_main()
