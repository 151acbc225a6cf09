"""sambacompose ドメインモデルパッケージ。"""

from sambacompose.models._base import SambaComposeBaseModel
from sambacompose.models.artifacts import (
    SMB_CONF_PATH,
    ArtifactBundle,
    ConfigDocument,
    FirewallPorts,
    IniSection,
    NssSettings,
    ServiceUnit,
    SliceUnit,
    TargetUnit,
)
from sambacompose.models.fragment import (
    AllCondition,
    AlwaysCondition,
    AnyCondition,
    Condition,
    FlagCondition,
    Fragment,
    NotCondition,
    OptionCondition,
)
from sambacompose.models.option import (
    MigrationStatus,
    Option,
    OptionPath,
    OptionType,
    format_path,
)
from sambacompose.models.resolved import ResolvedConfig
from sambacompose.models.result import (
    CompileFailure,
    CompileOutcome,
    CompileSuccess,
    Failure,
    OverrideNotice,
    RenameNotice,
)
from sambacompose.models.value import (
    ConfigValue,
    ListValue,
    MapValue,
    ScalarValue,
    from_python,
    to_python,
)

__all__ = [
    "AllCondition",
    "AlwaysCondition",
    "AnyCondition",
    "ArtifactBundle",
    "CompileFailure",
    "CompileOutcome",
    "CompileSuccess",
    "Condition",
    "ConfigDocument",
    "ConfigValue",
    "Failure",
    "FirewallPorts",
    "FlagCondition",
    "Fragment",
    "IniSection",
    "ListValue",
    "MapValue",
    "MigrationStatus",
    "NotCondition",
    "NssSettings",
    "Option",
    "OptionCondition",
    "OptionPath",
    "OptionType",
    "OverrideNotice",
    "RenameNotice",
    "ResolvedConfig",
    "SMB_CONF_PATH",
    "SambaComposeBaseModel",
    "ScalarValue",
    "ServiceUnit",
    "SliceUnit",
    "TargetUnit",
    "format_path",
    "from_python",
    "to_python",
]
