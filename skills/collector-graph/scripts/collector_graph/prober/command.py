from __future__ import annotations

import os
import re
import shutil
import subprocess
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Sequence

from ..flags import Flag
from ..utils import ToolState, run_cmd


HELPER_CLASS = "PrintGCMXBeanNames"
HELPER_SOURCE = Path(__file__).resolve().with_name(f"{HELPER_CLASS}.java")

# single-file source launch (JEP 330) arrived in JDK 11
SOURCE_LAUNCH_MIN_MAJOR = 11

_VERSION_RE = re.compile(r'version "(\d+)(?:\.(\d+))?')


class LauncherNotFoundError(FileNotFoundError):
    """No runtime launcher could be located; nothing can be probed."""


class HelperBuildError(RuntimeError):
    """The bundled helper could not be compiled for an older runtime."""


def _exe(name: str) -> str:
    return f"{name}.exe" if os.name == "nt" else name


def launcher_name() -> str:
    return _exe("java")


def resolve_launcher(java_home: Optional[str]) -> Path:
    if java_home:
        candidate = Path(java_home) / "bin" / launcher_name()
        if candidate.is_file():
            return candidate
        raise LauncherNotFoundError(f"no {launcher_name()} under {java_home}/bin")
    found = shutil.which("java")
    if not found:
        raise LauncherNotFoundError("java not found on PATH; set JAVA_HOME or --java-home")
    return Path(found)


def java_major_version(version_line: Optional[str]) -> Optional[int]:
    """Major release from a ``java -version`` banner; ``1.8.0_202`` is 8."""
    if not version_line:
        return None
    match = _VERSION_RE.search(version_line)
    if not match:
        return None
    major = int(match.group(1))
    if major == 1 and match.group(2):
        return int(match.group(2))
    return major


def supports_source_launch(version_line: Optional[str]) -> bool:
    major = java_major_version(version_line)
    # unknown banners get the benefit of the doubt
    return major is None or major >= SOURCE_LAUNCH_MIN_MAJOR


@dataclass(frozen=True)
class JavaRuntime:
    launcher: Path
    classpath: Optional[str] = None
    entry_point: str = str(HELPER_SOURCE)

    def command(self, flags: Sequence[Flag]) -> List[str]:
        cmd = [str(self.launcher)]
        cmd.extend(flag.token for flag in flags)
        if self.classpath:
            cmd.extend(["-classpath", self.classpath])
        cmd.append(self.entry_point)
        return cmd


def compile_helper(
    runtime: JavaRuntime,
    out_dir: Path,
    *,
    warnings: List[str],
    tools: ToolState,
) -> JavaRuntime:
    """Compile the helper with the runtime's javac and run it by class name."""
    javac = runtime.launcher.with_name(_exe("javac"))
    cmd = [str(javac), "-d", str(out_dir), str(HELPER_SOURCE)]
    try:
        proc = run_cmd(cmd, cwd=None, warnings=warnings, tools=tools, timeout=120)
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise HelperBuildError(f"javac failed: {exc}") from exc
    if proc is None:
        raise HelperBuildError(f"javac not found next to {runtime.launcher}; pass --main-class")
    if proc.returncode != 0:
        detail = (proc.stderr or "").strip().splitlines()
        raise HelperBuildError(
            f"javac exit status {proc.returncode}: {detail[0] if detail else 'no output'}"
        )
    classpath = str(out_dir)
    if runtime.classpath:
        classpath = os.pathsep.join([classpath, runtime.classpath])
    return replace(runtime, classpath=classpath, entry_point=HELPER_CLASS)
