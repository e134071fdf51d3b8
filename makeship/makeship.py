#!/usr/bin/env python3
import argparse
import os
import sys
from importlib.metadata import PackageNotFoundError, version as dist_version

from .backend import CommandBackend
from .butler import ButlerPublisher, butler_env_var, prompt_for_butler
from .config import get_config, init_config_assistant
from .errors import FormatError
from .orchestrator import BuildOrchestrator
from .packager import ArtifactPackager
from .prefs import PreferenceStore
from .targets import BuildTarget, all_targets, target_specs
from .util import game_url
from .version import Version, VersionStore


# Sadly argparse cannot handle nargs="*" and choices and will error if not at least one argument is provided
def _choices(values):
    def f(s):
        if s not in values:
            raise argparse.ArgumentTypeError(
                "Invalid choice. Options: {}".format(", ".join(values))
            )
        return s

    return f


def get_own_version():
    try:
        return dist_version("makeship")
    except PackageNotFoundError:
        return "unknown"


def get_build_version(args, version_store):
    if args.set_version is not None:
        try:
            version = Version.parse(args.set_version)
        except FormatError as exc:
            sys.exit(str(exc))
        if version_store.sync(version):
            print("Version set to {}".format(version))
    else:
        try:
            version = version_store.load()
        except FormatError as exc:
            sys.exit(
                "Could not read version file '{}': {}\n"
                "Pass --set-version to overwrite it.".format(version_store.path, exc)
            )

    if args.bump_minor:
        version = version_store.increment_minor(version)
        print("Incremented minor version to {}".format(version))
    if args.bump_patch:
        version = version_store.increment_patch(version)
        print("Incremented patch version to {}".format(version))
    return version


def get_targets(config):
    return [BuildTarget.from_config(spec, config) for spec in target_specs]


def list_targets(targets):
    for target in targets:
        print(
            "{:8} {:8} backends: {:12} channel: {:8} {}".format(
                target.name,
                "enabled" if target.enabled else "disabled",
                ", ".join(target.backends),
                target.channel,
                "" if target.is_available() else "(not available on this host)",
            )
        )


def get_backend(config):
    backend_config = config.get("backend", {})
    if not "command" in backend_config:
        sys.exit(
            "No build backend configured. Set 'command' in the [backend] section of your config."
        )
    return CommandBackend(backend_config["command"], backend_config.get("probe"))


def get_publisher(args, config):
    if args.skip_upload:
        return None
    publisher = ButlerPublisher(
        config["organization"],
        config["name"],
        PreferenceStore(),
        explicit_path=args.butler or config.get("butler", {}).get("path"),
        picker=prompt_for_butler,
    )
    publisher.verbose = args.verbose
    return publisher


def main(argv=None):
    parser = argparse.ArgumentParser(prog="makeship")
    parser.add_argument(
        "--init",
        action="store_true",
        help="Start assistant to create a new configuration.",
    )
    parser.add_argument(
        "--config",
        help="Specify config file manually. If not specified 'makeship.toml' in the current working directory is used.",
    )
    parser.add_argument(
        "-n",
        "--set-version",
        dest="set_version",
        help="Set the project version (X.Y.Z) and save it to the version file.",
    )
    parser.add_argument(
        "--bump-minor",
        action="store_true",
        help="Increment the minor version and reset the patch version before building.",
    )
    parser.add_argument(
        "--bump-patch",
        action="store_true",
        help="Increment the patch version before building.",
    )
    parser.add_argument(
        "--skip-upload",
        action="store_true",
        help="Build and package the targets, but do not push them with butler.",
    )
    parser.add_argument(
        "--butler",
        help="Path to the butler executable. Overrides the stored path and ${}.".format(
            butler_env_var
        ),
    )
    parser.add_argument(
        "--url",
        action="store_true",
        help="Output the itch.io page URL of the game and exit.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the targets and whether they are enabled, then exit.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load config and apply version changes, then exit without building.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Display more information (archived files, butler output)",
    )
    parser.add_argument(
        "--version",
        dest="display_version",
        action="store_true",
        help="Output the makeship version and exit.",
    )
    parser.add_argument(
        "targets",
        nargs="*",
        type=_choices(all_targets),
        default=[],
        help="Options: {}. Defaults to the targets enabled in the config.".format(
            ", ".join(all_targets)
        ),
    )
    args = parser.parse_args(argv)

    if args.display_version:
        print("makeship {}".format(get_own_version()))
        sys.exit(0)

    if args.init:
        init_config_assistant()
        sys.exit(0)

    config = get_config(args.config)

    if args.url:
        print(game_url(config["organization"], config["name"]))
        sys.exit(0)

    targets = get_targets(config)
    if args.list:
        list_targets(targets)
        sys.exit(0)

    version_store = VersionStore(config["version_file"])
    version = get_build_version(args, version_store)
    print("Building version '{}'".format(version))

    if args.check:
        print("Exiting because --check was passed.")
        sys.exit(0)

    os.makedirs(config["build_directory"], exist_ok=True)
    packager = ArtifactPackager(
        config["name"], config["versions_directory"], verbose=args.verbose
    )
    orchestrator = BuildOrchestrator(
        targets,
        get_backend(config),
        packager,
        get_publisher(args, config),
        config["name"],
        config["scenes"],
        config["build_directory"],
        version_store=version_store,
    )

    report = orchestrator.run_selected(version, args.targets or None)
    report.print_summary()
    sys.exit(1 if report.failures else 0)


if __name__ == "__main__":
    main()
