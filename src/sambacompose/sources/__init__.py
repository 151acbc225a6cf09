"""フラグメントソース読み込みモジュール。"""

from sambacompose.sources._loader import (
    SourceError,
    load_fragment_file,
    load_fragment_sources,
)

__all__ = [
    "SourceError",
    "load_fragment_file",
    "load_fragment_sources",
]
