#!/usr/bin/env python3
"""Collector graph CLI: probe JVM collector flag combinations and graph the results."""

from __future__ import annotations

import argparse
import json
import shlex
import sys
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .._fs import workspace_root, write_text
from ..combinations import generate_combinations, static_filter
from ..exporter import FORMATS, render_report
from ..flags import DEFAULT_TITLE, Combination, Flag, hotspot_vocabulary
from ..prober import (
    HELPER_CLASS,
    HelperBuildError,
    JavaProber,
    JavaRuntime,
    LauncherNotFoundError,
    ObservedResult,
    Prober,
    compile_helper,
    probe_combinations,
    resolve_launcher,
    supports_source_launch,
)
from ..reducer import drop_redundant_negatives
from ..utils import progress, set_quiet, tool_version
from .config import (
    non_negative_seconds,
    resolve_classpath,
    resolve_entry_point,
    resolve_java_home,
    resolve_out_path,
    resolve_timeout,
)


COMMANDS = ("graph", "plan")


def planned_combinations(vocabulary: Sequence[Flag]) -> List[Combination]:
    combos = generate_combinations(vocabulary)
    kept = static_filter(combos)
    progress(f"{len(kept)} of {len(combos)} combinations left after static filter")
    return kept


def run_pipeline(
    vocabulary: Sequence[Flag],
    prober: Prober,
    *,
    warnings: Optional[List[str]] = None,
) -> Dict[Combination, ObservedResult]:
    """Generate, filter, probe and reduce; returns the edges to render."""
    combos = planned_combinations(vocabulary)
    results = probe_combinations(combos, prober, warnings=warnings)
    progress(f"{len(results)} of {len(combos)} probes succeeded", done=True)
    reduced = drop_redundant_negatives(results)
    progress(f"{len(results) - len(reduced)} redundant negative combinations dropped")
    return reduced


def build_runtime(args: argparse.Namespace) -> JavaRuntime:
    launcher = resolve_launcher(resolve_java_home(args.java_home))
    return JavaRuntime(
        launcher=launcher,
        classpath=resolve_classpath(args.classpath),
        entry_point=resolve_entry_point(args.main_class),
    )


def emit_report(report: str, out_arg: Optional[str]) -> None:
    if not out_arg:
        sys.stdout.write(report)
        return
    out_path = resolve_out_path(out_arg, workspace_root=workspace_root())
    write_text(out_path, report)
    print(f"Report: {out_path}", file=sys.stderr)


def run_graph(args: argparse.Namespace) -> int:
    warnings: List[str] = []
    runtime = build_runtime(args)
    prober = JavaProber(
        runtime=runtime, timeout=resolve_timeout(args.timeout), warnings=warnings
    )
    version = tool_version(
        [str(runtime.launcher), "-version"],
        cwd=None,
        warnings=warnings,
        tools=prober.tools,
    )
    if version:
        progress(f"runtime: {version}")
    with tempfile.TemporaryDirectory(prefix="collector-graph-") as build_dir:
        if args.main_class is None and not supports_source_launch(version):
            prober.runtime = compile_helper(
                runtime, Path(build_dir), warnings=warnings, tools=prober.tools
            )
            progress(f"compiled {HELPER_CLASS} for {version}", done=True)
        results = run_pipeline(hotspot_vocabulary(), prober, warnings=warnings)
    emit_report(render_report(results, fmt=args.format, title=args.title), args.out)
    if warnings:
        print(f"{len(warnings)} warning(s); see above", file=sys.stderr)
    return 0


def run_plan(args: argparse.Namespace) -> int:
    runtime = build_runtime(args)
    for combo in planned_combinations(hotspot_vocabulary()):
        print(shlex.join(runtime.command(combo.flags)))
    return 0


def add_runtime_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--java-home", default=None, help="JVM installation to probe (default: $JAVA_HOME or PATH)"
    )
    parser.add_argument(
        "--classpath",
        default=None,
        help="Classpath for the probe JVM (default: $CLASSPATH or the helper directory)",
    )
    parser.add_argument(
        "--main-class",
        default=None,
        help="Entry point printing collector names (default: bundled helper source)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Graph how HotSpot GC flags map to the collectors the JVM selects"
    )
    subparsers = parser.add_subparsers(dest="command")

    graph_parser = subparsers.add_parser(
        "graph", help="Probe every flag combination and print the graph (default)"
    )
    add_runtime_options(graph_parser)
    graph_parser.add_argument(
        "--timeout",
        type=non_negative_seconds,
        default=60.0,
        help="Seconds to wait for each probe JVM (0 waits forever)",
    )
    graph_parser.add_argument("--title", default=DEFAULT_TITLE, help="Graph label")
    graph_parser.add_argument("--format", choices=list(FORMATS), default="dot")
    graph_parser.add_argument(
        "--out", default=None, help="Write report to file (relative to workspace/ or absolute)"
    )

    plan_parser = subparsers.add_parser(
        "plan", help="Print the probe commands without running them"
    )
    add_runtime_options(plan_parser)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or (argv[0] not in COMMANDS and argv[0] not in ("-h", "--help")):
        argv.insert(0, "graph")
    args = parser.parse_args(argv)
    set_quiet(args.quiet)

    try:
        if args.command == "plan":
            return run_plan(args)
        return run_graph(args)
    except (LauncherNotFoundError, HelperBuildError) as exc:
        print(json.dumps({"error": str(exc)}, ensure_ascii=True), file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
