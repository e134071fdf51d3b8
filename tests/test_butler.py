import os
import subprocess
import sys

import pytest

from makeship import butler
from makeship.butler import ButlerPublisher
from makeship.errors import ConfigError
from makeship.prefs import PreferenceStore, butler_path_key


@pytest.fixture
def prefs(tmp_path):
    return PreferenceStore(str(tmp_path / "prefs.toml"))


def make_publisher(prefs, **kwargs):
    kwargs.setdefault("environ", {})
    return ButlerPublisher("My Org", "Cool Game", prefs, **kwargs)


def test_target_is_slug_formatted(prefs):
    publisher = make_publisher(prefs)
    assert publisher.target("windows") == "my-org/cool-game:windows"


def test_explicit_path_wins(prefs):
    prefs.set(butler_path_key, "/stored/butler")
    publisher = make_publisher(
        prefs, explicit_path="/explicit/butler", environ={"MAKESHIP_BUTLER": "/env/butler"}
    )
    assert publisher.resolve_path() == "/explicit/butler"


def test_environment_before_preference(prefs):
    prefs.set(butler_path_key, "/stored/butler")
    publisher = make_publisher(prefs, environ={"MAKESHIP_BUTLER": "/env/butler"})
    assert publisher.resolve_path() == "/env/butler"


def test_preference_before_picker(prefs):
    prefs.set(butler_path_key, "/stored/butler")
    publisher = make_publisher(prefs, picker=lambda: pytest.fail("picker was called"))
    assert publisher.resolve_path() == "/stored/butler"


def test_picked_path_is_persisted(prefs):
    publisher = make_publisher(prefs, picker=lambda: "/picked/butler")
    assert publisher.resolve_path() == "/picked/butler"
    assert PreferenceStore(prefs.path).get(butler_path_key) == "/picked/butler"


def test_unresolved_path_raises(prefs):
    publisher = make_publisher(prefs, picker=lambda: None)
    with pytest.raises(ConfigError, match="not located"):
        publisher.resolve_path()


def test_unresolved_path_fails_upload(prefs):
    record = make_publisher(prefs).upload("game.zip", "windows", "1.0.0")
    assert not record.success
    assert "not located" in record.error


class FakeRun(object):
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.result = (returncode, stdout, stderr)
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        returncode, stdout, stderr = self.result
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)


def test_upload_invokes_butler_push(prefs, monkeypatch):
    run = FakeRun(stdout="Build is now processing")
    monkeypatch.setattr(butler.subprocess, "run", run)

    publisher = make_publisher(prefs, explicit_path="/opt/butler")
    record = publisher.upload("/builds/Cool Game.zip", "windows", "1.2.3")

    assert record.success
    assert record.stdout == "Build is now processing"
    cmd, kwargs = run.calls[0]
    assert cmd == [
        "/opt/butler",
        "push",
        "/builds/Cool Game.zip",
        "my-org/cool-game:windows",
        "--userversion",
        "1.2.3",
    ]
    assert kwargs["capture_output"]


def test_nonzero_exit_reports_stderr(prefs, monkeypatch):
    monkeypatch.setattr(
        butler.subprocess, "run", FakeRun(returncode=1, stderr="invalid api key")
    )
    record = make_publisher(prefs, explicit_path="/opt/butler").upload(
        "game.zip", "mac", "1.0.0"
    )
    assert not record.success
    assert "invalid api key" in record.error
    assert record.stderr == "invalid api key"


def test_missing_executable_is_a_failed_upload(prefs, tmp_path):
    publisher = make_publisher(prefs, explicit_path=str(tmp_path / "no-butler-here"))
    record = publisher.upload(str(tmp_path / "game.zip"), "linux", "1.0.0")
    assert not record.success
    assert "Exception during butler upload" in record.error


def write_fake_butler(path, body):
    with open(path, "w") as f:
        f.write("#!/bin/sh\n{}\n".format(body))
    os.chmod(path, 0o755)
    return str(path)


posix_only = pytest.mark.skipif(
    sys.platform.startswith("win"), reason="fake butler is a shell script"
)


@posix_only
def test_undecodable_butler_output_still_succeeds(prefs, tmp_path):
    fake = write_fake_butler(tmp_path / "butler", "printf '\\377 progress'; exit 0")
    record = make_publisher(prefs, explicit_path=fake).upload(
        str(tmp_path / "game.zip"), "windows", "1.0.0"
    )
    assert record.success
    assert record.stdout == "\ufffd progress"


@posix_only
def test_undecodable_butler_error_is_a_failed_upload(prefs, tmp_path):
    fake = write_fake_butler(tmp_path / "butler", "printf '\\377 no auth' >&2; exit 1")
    record = make_publisher(prefs, explicit_path=fake).upload(
        str(tmp_path / "game.zip"), "windows", "1.0.0"
    )
    assert not record.success
    assert "\ufffd no auth" in record.error


@posix_only
def test_unwritable_preferences_do_not_stop_upload(tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    prefs = PreferenceStore(str(blocker / "prefs.toml"))
    fake = write_fake_butler(tmp_path / "butler", "exit 0")

    record = make_publisher(prefs, picker=lambda: fake).upload(
        str(tmp_path / "game.zip"), "linux", "1.0.0"
    )

    assert record.success
    assert "Could not store butler path" in capsys.readouterr().err


def test_upload_decodes_leniently(prefs, monkeypatch):
    run = FakeRun()
    monkeypatch.setattr(butler.subprocess, "run", run)
    make_publisher(prefs, explicit_path="/opt/butler").upload("g.zip", "mac", "1.0.0")
    _, kwargs = run.calls[0]
    assert kwargs["errors"] == "replace"
