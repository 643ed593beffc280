import re
import subprocess
import sys


def run_cli(args, input_text=None, cwd=None):
    return subprocess.run(
        [sys.executable, "-m", "setup_logging.cli", *args],
        input=input_text,
        capture_output=True,
        text=True,
        cwd=cwd,
    )


def test_cli_version_matches_package():
    proc = run_cli(["--version"])
    assert proc.returncode == 0
    out = (proc.stdout + proc.stderr).strip()
    m = re.match(r"setup_logging\s+(\d+\.\d+\.\d+)", out)
    assert m, f"Unexpected version output: {out}"
    import setup_logging
    assert m.group(1) == setup_logging.__version__


def test_version_subcommand():
    proc = run_cli(["version"])
    assert proc.returncode == 0
    assert proc.stdout.startswith("setup_logging ")


def test_emit_writes_console_and_file(tmp_path):
    log_fmt = str(tmp_path / "logs" / "%Y-%m-%d.log")
    proc = run_cli(["emit", "--file", log_fmt, "hello", "world"])
    assert proc.returncode == 0, proc.stderr
    files = list((tmp_path / "logs").glob("*.log"))
    assert len(files) == 1
    lines = files[0].read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert re.fullmatch(r"\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\] Info  hello", lines[0])
    assert lines[1].endswith(" Info  world")
    assert "\x1b[32mInfo \x1b[0m hello" in proc.stderr


def test_emit_reads_stdin_with_module_tag(tmp_path):
    log_fmt = str(tmp_path / "out.log")
    proc = run_cli(
        ["emit", "--file", log_fmt, "--level", "debug", "--logger", "batch", "--severity", "warn"],
        input_text="one\ntwo\n",
    )
    assert proc.returncode == 0, proc.stderr
    text = (tmp_path / "out.log").read_text(encoding="utf-8")
    assert " [batch] Warn  one\n" in text
    assert " [batch] Warn  two\n" in text


def test_emit_respects_module_level(tmp_path):
    log_fmt = str(tmp_path / "out.log")
    proc = run_cli(["emit", "--file", log_fmt, "--logger", "quiet.sub", "--module-level", "quiet=error", "dropped"])
    assert proc.returncode == 0, proc.stderr
    assert not (tmp_path / "out.log").exists()


def test_bad_level_exits_with_message(tmp_path):
    proc = run_cli(["emit", "--file", str(tmp_path / "x.log"), "--level", "shout", "msg"])
    assert proc.returncode == 2
    assert "[setup_logging] unknown logging level" in proc.stderr


def test_demo_overwrites_progress_on_console_only(tmp_path):
    log_fmt = str(tmp_path / "demo.log")
    proc = run_cli(["demo", "--file", log_fmt, "--steps", "3", "--delay", "0"])
    assert proc.returncode == 0, proc.stderr
    assert proc.stderr.count("\x1b[A") == 4
    text = (tmp_path / "demo.log").read_text(encoding="utf-8")
    assert "\x1b[" not in text
    assert text.count("Downloading...") == 5
    assert "Could not reach mirror.\n" in text
