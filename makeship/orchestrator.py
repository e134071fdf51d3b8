import sys

from .errors import MakeshipError
from .util import eprint

IDLE = "Idle"
BUILDING = "Building"
BUILD_FAILED = "BuildFailed"
PACKAGING = "Packaging"
PACKAGE_FAILED = "PackageFailed"
PACKAGED = "Packaged"
UPLOADING = "Uploading"
UPLOAD_FAILED = "UploadFailed"
UPLOADED = "Uploaded"

failed_states = [BUILD_FAILED, PACKAGE_FAILED, UPLOAD_FAILED]


class TargetOutcome(object):
    def __init__(self, name, label=None):
        self.name = name
        self.label = label or name
        self.state = IDLE
        self.message = None
        self.build_result = None
        self.artifact = None
        self.record = None

    @property
    def failed(self):
        return self.state in failed_states

    def fail(self, state, message):
        self.state = state
        self.message = message
        return self

    def __repr__(self):
        return "TargetOutcome({!r}, {})".format(self.name, self.state)


class BuildReport(object):
    def __init__(self, version):
        self.version = version
        self.outcomes = []

    @property
    def successes(self):
        return [o for o in self.outcomes if not o.failed]

    @property
    def failures(self):
        return [o for o in self.outcomes if o.failed]

    def success_notices(self):
        notices = []
        for o in self.successes:
            if o.state == UPLOADED:
                notices.append(
                    "{} {} uploaded to channel '{}'".format(
                        o.label, self.version, o.artifact.channel
                    )
                )
            else:
                notices.append(
                    "{} {} packaged at {}".format(o.label, self.version, o.artifact.path)
                )
        return notices

    def failure_messages(self):
        return ["[{}] {}".format(o.label, o.message) for o in self.failures]

    def summary(self):
        lines = self.success_notices()
        failures = self.failure_messages()
        if failures:
            lines.append("{} target(s) failed:".format(len(failures)))
            lines.extend(failures)
        return "\n".join(lines)

    def print_summary(self):
        for notice in self.success_notices():
            print(notice)
        failures = self.failure_messages()
        if failures:
            eprint("{} target(s) failed:".format(len(failures)))
            for message in failures:
                eprint(message)


class BuildOrchestrator(object):
    """Runs build, package and upload for a sequence of targets.

    Targets are processed one after another. A failing target is recorded in
    the report and the next one is started; nothing is raised to the caller.
    With `publisher=None` every target stops after packaging.
    """

    def __init__(
        self,
        targets,
        backend,
        packager,
        publisher,
        game,
        scenes,
        builds_directory,
        version_store=None,
    ):
        self.targets = list(targets)
        self.backend = backend
        self.packager = packager
        self.publisher = publisher
        self.game = game
        self.scenes = list(scenes)
        self.builds_directory = builds_directory
        self.version_store = version_store

    def get_target(self, name):
        for target in self.targets:
            if target.name == name:
                return target
        return None

    def get_selection(self, selected=None):
        if selected is None:
            return [t.name for t in self.targets if t.enabled]
        # keep the caller's order, drop duplicates
        names = []
        for name in selected:
            if name not in names:
                names.append(name)
        return names

    def run_selected(self, version, selected=None):
        if self.version_store is not None and self.version_store.sync(version):
            print("Saved version {}".format(version))

        names = self.get_selection(selected)
        report = BuildReport(str(version))
        if not names:
            print("No targets selected.")
            return report

        print("Building targets:", ", ".join(names))
        for name in names:
            print(">> Building target {}".format(name))
            target = self.get_target(name)
            if target is None:
                outcome = TargetOutcome(name).fail(
                    BUILD_FAILED, "Unknown target '{}'".format(name)
                )
            else:
                outcome = self.run_target(target, version)
            report.outcomes.append(outcome)
            print("Target {} finished: {}".format(name, outcome.state))
        return report

    def run_target(self, target, version):
        outcome = TargetOutcome(target.name, target.label)
        if not target.is_available():
            return outcome.fail(
                BUILD_FAILED,
                "{} builds are not available on this host ({})".format(
                    target.label, sys.platform
                ),
            )

        outcome.state = BUILDING
        result = target.build(self.backend, self.game, self.scenes, self.builds_directory)
        outcome.build_result = result
        if not result.success:
            return outcome.fail(BUILD_FAILED, result.error)

        outcome.state = PACKAGING
        try:
            outcome.artifact = target.package(result, self.packager, version)
        except (OSError, MakeshipError) as exc:
            return outcome.fail(PACKAGE_FAILED, "Packaging failed: {}".format(exc))
        outcome.state = PACKAGED
        if self.publisher is None:
            return outcome

        outcome.state = UPLOADING
        try:
            record = target.publish(outcome.artifact, self.publisher, version)
        except (OSError, MakeshipError) as exc:
            return outcome.fail(UPLOAD_FAILED, "Upload failed: {}".format(exc))

        outcome.record = record
        if not record.success:
            return outcome.fail(UPLOAD_FAILED, record.error)
        outcome.state = UPLOADED
        return outcome
