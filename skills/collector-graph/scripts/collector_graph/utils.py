from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Set


_QUIET = False


@dataclass
class ToolState:
    missing: Set[str] = field(default_factory=set)
    used: Set[str] = field(default_factory=set)


def set_quiet(quiet: bool) -> None:
    global _QUIET
    _QUIET = quiet


def progress(message: str, done: bool = False) -> None:
    """Print a progress message to stderr (doesn't interfere with stdout output)."""
    if _QUIET:
        return
    if done:
        print(f"  [done] {message}", file=sys.stderr)
    else:
        print(f"  [....] {message}", file=sys.stderr)


def warn(message: str, warnings: Optional[List[str]] = None) -> None:
    """Record a warning and echo it to stderr, even when quiet."""
    if warnings is not None:
        warnings.append(message)
    print(f"  [warn] {message}", file=sys.stderr)


def run_cmd(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path],
    warnings: List[str],
    tools: ToolState,
    capture: bool = True,
    text: bool = True,
    timeout: Optional[float] = None,
) -> Optional[subprocess.CompletedProcess]:
    """Run ``cmd`` to completion; ``None`` when the executable is missing.

    ``subprocess.TimeoutExpired`` and other ``OSError`` failures propagate.
    """
    tool = cmd[0]
    if tool in tools.missing:
        return None
    tools.used.add(tool)
    try:
        return subprocess.run(
            list(cmd),
            cwd=str(cwd) if cwd else None,
            check=False,
            text=text,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.PIPE if capture else None,
            timeout=timeout,
        )
    except FileNotFoundError:
        tools.missing.add(tool)
        warn(f"Missing tool: {tool}", warnings)
        return None


def tool_version(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path],
    warnings: List[str],
    tools: ToolState,
) -> Optional[str]:
    try:
        result = run_cmd(cmd, cwd=cwd, warnings=warnings, tools=tools, capture=True, timeout=30)
    except (OSError, subprocess.TimeoutExpired) as exc:
        warn(f"{cmd[0]} version check failed: {exc}", warnings)
        return None
    if not result:
        return None
    # java -version writes to stderr
    output = result.stdout or result.stderr
    if not output:
        return None
    return output.splitlines()[0].strip()
