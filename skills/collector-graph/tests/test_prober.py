import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.append(os.path.join(os.path.dirname(__file__), "../scripts"))

from collector_graph.flags import Combination, Flag
from collector_graph.prober import (
    HELPER_CLASS,
    HELPER_SOURCE,
    HelperBuildError,
    JavaProber,
    JavaRuntime,
    LauncherNotFoundError,
    ProbeFailure,
    ProbeSuccess,
    compile_helper,
    java_major_version,
    parse_collector_names,
    probe_combinations,
    resolve_launcher,
    supports_source_launch,
)
from collector_graph.utils import ToolState, set_quiet


RUNTIME = JavaRuntime(launcher=Path("/opt/jdk/bin/java"), classpath="/tmp/cp", entry_point="Main")


def completed(returncode, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestCommand(unittest.TestCase):
    def test_command_layout(self):
        flags = [Flag("-XX:+UseG1GC"), Flag("-XX:-UseSerialGC")]
        self.assertEqual(
            RUNTIME.command(flags),
            [
                "/opt/jdk/bin/java",
                "-XX:+UseG1GC",
                "-XX:-UseSerialGC",
                "-classpath",
                "/tmp/cp",
                "Main",
            ],
        )

    def test_default_entry_point_is_bundled_helper(self):
        runtime = JavaRuntime(launcher=Path("java"), classpath=".")
        self.assertEqual(runtime.entry_point, str(HELPER_SOURCE))
        self.assertTrue(HELPER_SOURCE.is_file())

    def test_resolve_launcher_from_java_home(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            launcher = Path(temp_dir) / "bin" / ("java.exe" if os.name == "nt" else "java")
            launcher.parent.mkdir(parents=True)
            launcher.write_text("", encoding="utf-8")
            self.assertEqual(resolve_launcher(temp_dir), launcher)

    def test_missing_launcher_is_fatal(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            with self.assertRaises(LauncherNotFoundError):
                resolve_launcher(temp_dir)
        with patch("collector_graph.prober.command.shutil.which", return_value=None):
            with self.assertRaises(LauncherNotFoundError):
                resolve_launcher(None)


class TestParse(unittest.TestCase):
    def test_splits_on_commas(self):
        self.assertEqual(
            parse_collector_names(b"G1 Young Generation,G1 Old Generation"),
            ("G1 Young Generation", "G1 Old Generation"),
        )

    def test_strips_surrounding_whitespace_only(self):
        self.assertEqual(parse_collector_names(b"Copy,MarkSweepCompact\n"), ("Copy", "MarkSweepCompact"))

    def test_empty_components_are_literal(self):
        self.assertEqual(parse_collector_names(b"A,,B"), ("A", "", "B"))
        self.assertEqual(parse_collector_names(b""), ("",))

    def test_bad_encoding_raises(self):
        with self.assertRaises(UnicodeDecodeError):
            parse_collector_names(b"\xff\xfe")


class TestJavaProber(unittest.TestCase):
    def setUp(self):
        set_quiet(True)

    def tearDown(self):
        set_quiet(False)

    @patch("collector_graph.utils.subprocess.run")
    def test_success(self, run):
        run.return_value = completed(0, stdout=b"PS Scavenge,PS MarkSweep")
        outcome = JavaProber(runtime=RUNTIME, timeout=5)([Flag("-XX:+UseParallelGC")])
        self.assertEqual(outcome, ProbeSuccess(names=("PS Scavenge", "PS MarkSweep")))
        args, kwargs = run.call_args
        self.assertEqual(args[0][1], "-XX:+UseParallelGC")
        self.assertEqual(kwargs["timeout"], 5)
        self.assertFalse(kwargs["text"])

    @patch("collector_graph.utils.subprocess.run")
    def test_non_zero_exit_is_failure(self, run):
        run.return_value = completed(
            1, stderr=b"Conflicting collector combinations in option list\nError: Could not create the Java Virtual Machine."
        )
        outcome = JavaProber(runtime=RUNTIME)([Flag("-XX:+UseG1GC"), Flag("-XX:+UseSerialGC")])
        self.assertIsInstance(outcome, ProbeFailure)
        self.assertEqual(outcome.returncode, 1)
        self.assertIn("Conflicting collector combinations", outcome.stderr)

    @patch("collector_graph.utils.subprocess.run")
    def test_timeout_is_failure(self, run):
        run.side_effect = subprocess.TimeoutExpired(cmd="java", timeout=5)
        outcome = JavaProber(runtime=RUNTIME, timeout=5)([Flag("-XX:+UseG1GC")])
        self.assertIsInstance(outcome, ProbeFailure)
        self.assertIn("timed out", outcome.reason)

    @patch("collector_graph.utils.subprocess.run")
    def test_launch_errors_are_failures(self, run):
        run.side_effect = PermissionError("denied")
        outcome = JavaProber(runtime=RUNTIME)([Flag("-XX:+UseG1GC")])
        self.assertIsInstance(outcome, ProbeFailure)
        self.assertIn("launch failed", outcome.reason)

    @patch("collector_graph.utils.subprocess.run")
    def test_missing_launcher_is_failure(self, run):
        run.side_effect = FileNotFoundError("java")
        prober = JavaProber(runtime=RUNTIME)
        outcome = prober([Flag("-XX:+UseG1GC")])
        self.assertIsInstance(outcome, ProbeFailure)
        self.assertIn("/opt/jdk/bin/java", prober.tools.missing)

    @patch("collector_graph.utils.subprocess.run")
    def test_undecodable_output_is_failure(self, run):
        run.return_value = completed(0, stdout=b"\xff\xfe")
        outcome = JavaProber(runtime=RUNTIME)([Flag("-XX:+UseG1GC")])
        self.assertIsInstance(outcome, ProbeFailure)
        self.assertEqual(outcome.returncode, 0)


class TestProbeCombinations(unittest.TestCase):
    def setUp(self):
        set_quiet(True)

    def tearDown(self):
        set_quiet(False)

    def test_failures_are_omitted_and_order_kept(self):
        calls = []

        def fake(flags):
            calls.append([flag.token for flag in flags])
            if len(flags) == 2:
                return ProbeFailure(reason="exit status 1", returncode=1)
            return ProbeSuccess(names=(flags[0].switch,))

        combos = [
            Combination((Flag("+B"),)),
            Combination((Flag("+A"), Flag("+B"))),
            Combination((Flag("+A"),)),
        ]
        warnings = []
        with patch("sys.stderr"):
            results = probe_combinations(combos, fake, warnings=warnings)
        self.assertEqual(list(results), [combos[0], combos[2]])
        self.assertEqual(results[combos[2]], ("A",))
        self.assertEqual(calls, [["+B"], ["+A", "+B"], ["+A"]])
        self.assertEqual(len(warnings), 1)
        self.assertIn("+A +B", warnings[0])


class TestHelperLaunch(unittest.TestCase):
    def test_java_major_version(self):
        self.assertEqual(java_major_version('java version "1.8.0_202"'), 8)
        self.assertEqual(java_major_version('openjdk version "10.0.2" 2018-07-17'), 10)
        self.assertEqual(java_major_version('openjdk version "11.0.2" 2019-01-15'), 11)
        self.assertEqual(java_major_version('openjdk version "17" 2021-09-14'), 17)
        self.assertIsNone(java_major_version("garbage"))
        self.assertIsNone(java_major_version(None))

    def test_source_launch_needs_jdk_11(self):
        self.assertFalse(supports_source_launch('java version "1.8.0_202"'))
        self.assertFalse(supports_source_launch('openjdk version "9.0.4"'))
        self.assertTrue(supports_source_launch('openjdk version "21.0.1"'))
        self.assertTrue(supports_source_launch(None))

    def test_command_without_classpath(self):
        runtime = JavaRuntime(launcher=Path("java"))
        self.assertEqual(
            runtime.command([Flag("-XX:+UseG1GC")]),
            ["java", "-XX:+UseG1GC", str(HELPER_SOURCE)],
        )

    @patch("collector_graph.utils.subprocess.run")
    def test_compile_helper_switches_to_class_entry_point(self, run):
        run.return_value = subprocess.CompletedProcess([], 0, stdout="", stderr="")
        runtime = JavaRuntime(launcher=Path("/jdk8/bin/java"), classpath="/extra")
        compiled = compile_helper(runtime, Path("/tmp/build"), warnings=[], tools=ToolState())
        self.assertEqual(
            run.call_args.args[0],
            ["/jdk8/bin/javac", "-d", "/tmp/build", str(HELPER_SOURCE)],
        )
        self.assertEqual(compiled.entry_point, HELPER_CLASS)
        self.assertEqual(compiled.classpath, os.pathsep.join(["/tmp/build", "/extra"]))
        self.assertEqual(
            compiled.command([Flag("-XX:+UseSerialGC")])[-3:],
            ["-classpath", compiled.classpath, HELPER_CLASS],
        )

    @patch("collector_graph.utils.subprocess.run")
    def test_compile_helper_errors(self, run):
        runtime = JavaRuntime(launcher=Path("/jdk8/bin/java"))
        run.return_value = subprocess.CompletedProcess([], 2, stdout="", stderr="error: bad\n")
        with self.assertRaises(HelperBuildError):
            compile_helper(runtime, Path("/tmp/build"), warnings=[], tools=ToolState())
        run.side_effect = FileNotFoundError("javac")
        with patch("sys.stderr"):
            with self.assertRaises(HelperBuildError):
                compile_helper(runtime, Path("/tmp/build"), warnings=[], tools=ToolState())


if __name__ == "__main__":
    unittest.main()
