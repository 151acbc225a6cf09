"""コンパイルエンジンパッケージ。

移行・マージ・アサーション・合成の各段階と、それらを束ねるパイプラインを提供する。
このパッケージは I/O を行わない。
"""

from sambacompose.core._assertions import SAMBA_ASSERTIONS, Assertion, evaluate_assertions
from sambacompose.core._compiler import compile_configuration, run_pipeline
from sambacompose.core._document import build_config_document
from sambacompose.core._merge import MERGE_POLICY, MergeResult, deep_merge, merge_fragments
from sambacompose.core._migration import (
    Assignment,
    NormalizedFragment,
    normalize,
    normalize_fragment,
    normalize_fragments,
)
from sambacompose.core._synthesizer import build_artifacts
from sambacompose.core._units import ROLES, DaemonRole, build_service_units

__all__ = [
    "Assertion",
    "Assignment",
    "DaemonRole",
    "MERGE_POLICY",
    "MergeResult",
    "NormalizedFragment",
    "ROLES",
    "SAMBA_ASSERTIONS",
    "build_artifacts",
    "build_config_document",
    "build_service_units",
    "compile_configuration",
    "deep_merge",
    "evaluate_assertions",
    "merge_fragments",
    "normalize",
    "normalize_fragment",
    "normalize_fragments",
    "run_pipeline",
]
