from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Mapping, Optional

from ..prober import HELPER_SOURCE


def resolve_java_home(value: Optional[str], environ: Mapping[str, str] = os.environ) -> Optional[str]:
    if value:
        return value
    return environ.get("JAVA_HOME") or None


def resolve_classpath(
    value: Optional[str], environ: Mapping[str, str] = os.environ
) -> Optional[str]:
    """Explicit classpath, else $CLASSPATH, else none.

    The source-file helper must not also be on the classpath as a compiled
    class; the JVM refuses to launch a source file whose class it can load.
    """
    if value:
        return value
    return environ.get("CLASSPATH") or None


def resolve_entry_point(main_class: Optional[str]) -> str:
    return main_class or str(HELPER_SOURCE)


def non_negative_seconds(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}")
    if seconds < 0:
        raise argparse.ArgumentTypeError("timeout must be >= 0")
    return seconds


def resolve_timeout(seconds: float) -> Optional[float]:
    return seconds or None


def resolve_out_path(out_arg: str, *, workspace_root: Path) -> Path:
    out_path = Path(out_arg)
    if out_path.is_absolute():
        return out_path
    out_str = out_path.as_posix()
    if out_str.startswith("workspace/"):
        out_path = Path(out_str[len("workspace/") :])
    return (workspace_root / out_path).resolve()
