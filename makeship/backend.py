import os
import subprocess
from collections import namedtuple

from .errors import BuildBackendError

BackendReport = namedtuple("BackendReport", ["success", "error"])


class BuildBackend(object):
    """The engine build pipeline, as seen from makeship.

    `build` populates `output_path` and reports success or failure,
    `is_installed` says whether a backend variant (toolchain) can be used
    for a target at all.
    """

    def build(self, target, variant, scenes, output_path):
        raise NotImplementedError

    def is_installed(self, target, variant):
        raise NotImplementedError


class CommandBackend(BuildBackend):
    def __init__(self, command, probe=None):
        self.command = command
        self.probe = probe

    def format_command(self, template, target, variant, scenes=(), output_path=""):
        try:
            return template.format(
                target=target,
                variant=variant,
                scenes=",".join(scenes),
                output_path=output_path,
            )
        except (KeyError, IndexError, ValueError, AttributeError) as exc:
            raise BuildBackendError(
                target, variant, "Invalid command template '{}': {}".format(template, exc)
            )

    def get_env(self, target, variant, scenes=(), output_path=""):
        env = dict(os.environ)
        env.update(
            {
                "MAKESHIP_TARGET": target,
                "MAKESHIP_VARIANT": variant,
                "MAKESHIP_SCENES": ",".join(scenes),
                "MAKESHIP_OUTPUT_PATH": output_path,
            }
        )
        return env

    def is_installed(self, target, variant):
        if not self.probe:
            return True
        command = self.format_command(self.probe, target, variant)
        res = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            env=self.get_env(target, variant),
        )
        return res.returncode == 0

    def build(self, target, variant, scenes, output_path):
        command = self.format_command(self.command, target, variant, scenes, output_path)
        print("Running '{}'".format(command))
        res = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            errors="replace",
            env=self.get_env(target, variant, scenes, output_path),
        )
        if res.returncode != 0:
            detail = res.stderr.strip() or "exit status {}".format(res.returncode)
            return BackendReport(False, detail)
        return BackendReport(True, None)
