import os
import shutil
import subprocess
import sys

from .errors import ConfigError
from .prefs import butler_path_key
from .util import eprint, format_slug, prompt

butler_env_var = "MAKESHIP_BUTLER"


class PublishRecord(object):
    def __init__(self, success, stdout="", stderr="", error=None, artifact=None):
        self.success = success
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.artifact = artifact

    def __repr__(self):
        return "PublishRecord(success={!r}, error={!r})".format(
            self.success, self.error
        )


class Publisher(object):
    def upload(self, artifact_path, channel, version):
        raise NotImplementedError


def prompt_for_butler():
    if not sys.stdin.isatty():
        return None
    return prompt("Locate butler executable", shutil.which("butler"))


class ButlerPublisher(Publisher):
    """Pushes artifacts to itch.io with butler.

    The butler executable is resolved from an explicit path, the MAKESHIP_BUTLER
    environment variable, the stored preference and finally `picker`, a
    callable returning a path or None. A picked path is stored for future runs.
    """

    def __init__(
        self, organization, game, prefs, explicit_path=None, picker=None, environ=None
    ):
        self.organization = organization
        self.game = game
        self.prefs = prefs
        self.explicit_path = explicit_path
        self.picker = picker
        self.environ = os.environ if environ is None else environ
        self.verbose = False

    def resolve_path(self):
        if self.explicit_path:
            return self.explicit_path
        if self.environ.get(butler_env_var):
            return self.environ[butler_env_var]
        stored = self.prefs.get(butler_path_key)
        if stored:
            return stored
        if self.picker is not None:
            picked = self.picker()
            if picked:
                try:
                    self.prefs.set(butler_path_key, picked)
                    print("Stored butler path '{}'".format(picked))
                except OSError as exc:
                    eprint("Could not store butler path: {}".format(exc))
                return picked
        raise ConfigError("butler executable not located. Upload cancelled.")

    def target(self, channel):
        return "{}/{}:{}".format(
            format_slug(self.organization), format_slug(self.game), channel
        )

    def get_command(self, butler_path, artifact_path, channel, version):
        return [
            butler_path,
            "push",
            artifact_path,
            self.target(channel),
            "--userversion",
            str(version),
        ]

    def upload(self, artifact_path, channel, version):
        try:
            butler_path = self.resolve_path()
        except (ConfigError, OSError) as exc:
            return PublishRecord(False, error=str(exc))

        cmd = self.get_command(butler_path, artifact_path, channel, version)
        print("Pushing {} to {}".format(artifact_path, self.target(channel)))
        try:
            res = subprocess.run(
                cmd, capture_output=True, text=True, errors="replace"
            )
        except OSError as exc:
            return PublishRecord(
                False, error="Exception during butler upload: {}".format(exc)
            )

        if res.returncode == 0:
            if self.verbose:
                print("Butler upload finished:\n{}".format(res.stdout))
            return PublishRecord(True, stdout=res.stdout, stderr=res.stderr)
        return PublishRecord(
            False,
            stdout=res.stdout,
            stderr=res.stderr,
            error="Butler upload failed:\n{}".format(res.stderr.strip()),
        )
