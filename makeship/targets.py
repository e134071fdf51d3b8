import os
import sys
from collections import namedtuple

from .errors import BuildBackendError, UploadError
from .util import replace_path

TargetSpec = namedtuple(
    "TargetSpec",
    [
        "name",
        "label",
        "channel",  # default itch.io channel
        "backend_target",
        "output_name",
        "backends",
        "default_enabled",
        "host_platforms",  # sys.platform prefixes able to build this, None for any
    ],
)

target_specs = [
    TargetSpec(
        "windows",
        "Windows",
        "windows",
        "StandaloneWindows64",
        "{game}.exe",
        ("il2cpp", "mono"),
        True,
        None,
    ),
    TargetSpec(
        "mac",
        "Mac",
        "mac",
        "StandaloneOSX",
        "MacBuild.app",
        ("il2cpp", "mono"),
        False,
        ("darwin",),
    ),
    TargetSpec(
        "linux",
        "Linux",
        "linux",
        "StandaloneLinux64",
        "LinuxBuild.x86_64",
        ("il2cpp", "mono"),
        False,
        None,
    ),
    TargetSpec(
        "webgl", "WebGL", "WebGL", "WebGL", "WebGLBuild", ("mono",), False, None
    ),
]

all_targets = [spec.name for spec in target_specs]

BuildResult = namedtuple(
    "BuildResult", ["success", "output_directory", "error", "variant"]
)


def get_target_spec(name):
    for spec in target_specs:
        if spec.name == name:
            return spec
    raise KeyError(name)


class BuildTarget(object):
    def __init__(self, spec, enabled=None, backends=None, channel=None):
        self.spec = spec
        self.enabled = spec.default_enabled if enabled is None else enabled
        self.backends = list(backends or spec.backends)
        self.channel = channel or spec.channel

    @classmethod
    def from_config(cls, spec, config):
        section = config.get(spec.name, {})
        return cls(
            spec,
            enabled=section.get("enabled"),
            backends=section.get("backends"),
            channel=section.get("channel"),
        )

    @property
    def name(self):
        return self.spec.name

    @property
    def label(self):
        return self.spec.label

    def is_available(self, platform=None):
        platform = platform or sys.platform
        if self.spec.host_platforms is None:
            return True
        return any(platform.startswith(p) for p in self.spec.host_platforms)

    def get_output_directory(self, game, builds_directory):
        return os.path.join(
            builds_directory, "{}_{}".format(game, self.spec.backend_target)
        )

    def get_output_path(self, game, builds_directory):
        return os.path.join(
            self.get_output_directory(game, builds_directory),
            self.spec.output_name.format(game=game),
        )

    def build(self, backend, game, scenes, builds_directory):
        output_directory = self.get_output_directory(game, builds_directory)
        output_path = self.get_output_path(game, builds_directory)
        target = self.spec.backend_target
        replace_path(output_directory)

        errors = []
        attempted = False
        for variant in self.backends:
            try:
                if not backend.is_installed(target, variant):
                    print("Backend {} is not installed for {}".format(variant, target))
                    continue
                if attempted:
                    replace_path(output_directory)
                attempted = True
                print("Building {} with {}..".format(target, variant))
                report = backend.build(target, variant, list(scenes), output_path)
            except BuildBackendError as exc:
                errors.append(str(exc))
                continue
            except OSError as exc:
                errors.append(str(BuildBackendError(target, variant, exc)))
                continue

            if report.success:
                print("Build for {} succeeded.".format(target))
                return BuildResult(True, output_directory, None, variant)
            errors.append(str(BuildBackendError(target, variant, report.error)))

        if not attempted:
            error = "Build for {} failed: none of the backends [{}] are installed".format(
                self.label, ", ".join(self.backends)
            )
        else:
            error = "Build for {} failed:\n{}".format(self.label, "\n".join(errors))
        return BuildResult(False, output_directory, error, None)

    def package(self, result, packager, version):
        if not result.success:
            raise UploadError(
                "Not packaging {}: the build did not succeed".format(self.label)
            )
        return packager.package(
            result.output_directory,
            "{}.zip".format(result.output_directory),
            self.label,
            version,
            self.channel,
        )

    def publish(self, artifact, publisher, version):
        record = publisher.upload(artifact.path, self.channel, str(version))
        record.artifact = artifact
        return record

    def upload(self, result, packager, publisher, version):
        artifact = self.package(result, packager, version)
        return self.publish(artifact, publisher, version)

    def __repr__(self):
        return "BuildTarget({!r}, enabled={!r})".format(self.name, self.enabled)
