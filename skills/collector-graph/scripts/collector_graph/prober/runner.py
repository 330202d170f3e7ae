from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..flags import Combination, Flag
from ..utils import ToolState, progress, run_cmd, warn
from .command import JavaRuntime


ObservedResult = Tuple[str, ...]


@dataclass(frozen=True)
class ProbeSuccess:
    names: ObservedResult


@dataclass(frozen=True)
class ProbeFailure:
    reason: str
    returncode: Optional[int] = None
    stderr: str = ""


ProbeOutcome = Union[ProbeSuccess, ProbeFailure]
Prober = Callable[[Sequence[Flag]], ProbeOutcome]


def parse_collector_names(stdout: bytes) -> ObservedResult:
    """Split helper output on commas. Raises ``UnicodeDecodeError`` on bad bytes."""
    text = stdout.decode("utf-8").strip()
    return tuple(text.split(","))


def _stderr_tail(stderr: Optional[bytes], max_lines: int = 3) -> str:
    if not stderr:
        return ""
    lines = stderr.decode("utf-8", errors="replace").strip().splitlines()
    return " | ".join(line.strip() for line in lines[:max_lines])


@dataclass
class JavaProber:
    """Launch one JVM per call and report the collectors it selected."""

    runtime: JavaRuntime
    timeout: Optional[float] = None
    tools: ToolState = field(default_factory=ToolState)
    warnings: List[str] = field(default_factory=list)

    def __call__(self, flags: Sequence[Flag]) -> ProbeOutcome:
        cmd = self.runtime.command(flags)
        try:
            proc = run_cmd(
                cmd,
                cwd=None,
                warnings=self.warnings,
                tools=self.tools,
                capture=True,
                text=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return ProbeFailure(reason=f"timed out after {self.timeout}s")
        except OSError as exc:
            return ProbeFailure(reason=f"launch failed: {exc}")
        if proc is None:
            return ProbeFailure(reason=f"launcher missing: {cmd[0]}")
        if proc.returncode != 0:
            return ProbeFailure(
                reason=f"exit status {proc.returncode}",
                returncode=proc.returncode,
                stderr=_stderr_tail(proc.stderr),
            )
        try:
            names = parse_collector_names(proc.stdout or b"")
        except UnicodeDecodeError as exc:
            return ProbeFailure(reason=f"unreadable output: {exc}", returncode=0)
        return ProbeSuccess(names=names)


def probe_combinations(
    combos: Iterable[Combination],
    prober: Prober,
    *,
    warnings: Optional[List[str]] = None,
) -> Dict[Combination, ObservedResult]:
    """Probe each combination in turn; failed probes are left out of the map."""
    results: Dict[Combination, ObservedResult] = {}
    for combo in combos:
        progress(f"probe {combo.label}")
        outcome = prober(combo.flags)
        if isinstance(outcome, ProbeSuccess):
            results[combo] = outcome.names
            continue
        message = f"probe failed for {combo.label}: {outcome.reason}"
        if outcome.stderr:
            message += f" ({outcome.stderr})"
        warn(message, warnings)
    return results
