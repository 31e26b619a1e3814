import subprocess
import sys


def _run(*args):
    return subprocess.run(
        [sys.executable, "-m", "counter_queue.app", *args],
        capture_output=True,
        text=True,
        check=False,
    )


def test_app_help_runs():
    proc = _run("-h")
    assert proc.returncode == 0
    out = proc.stdout + proc.stderr
    assert "main entrypoint" in out
    assert "serve" in out
    assert "staff" in out


def test_app_requires_a_command():
    proc = _run()
    assert proc.returncode != 0


def test_serve_help_runs():
    proc = _run("serve", "-h")
    assert proc.returncode == 0
    out = proc.stdout + proc.stderr
    assert "--room" in out
    assert "--ticket-base" in out
    assert "--staff-password" in out


def test_staff_help_lists_actions():
    proc = _run("staff", "-h")
    assert proc.returncode == 0
    out = proc.stdout + proc.stderr
    assert "call-for-assignment" in out
    assert "call-room" in out
