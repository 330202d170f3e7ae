from .command import (
    HELPER_CLASS,
    HELPER_SOURCE,
    HelperBuildError,
    JavaRuntime,
    LauncherNotFoundError,
    compile_helper,
    java_major_version,
    resolve_launcher,
    supports_source_launch,
)
from .runner import (
    JavaProber,
    ObservedResult,
    ProbeFailure,
    ProbeOutcome,
    ProbeSuccess,
    Prober,
    parse_collector_names,
    probe_combinations,
)

__all__ = [name for name in globals().keys() if not name.startswith("_")]
