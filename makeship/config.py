import os
import subprocess
import sys

import toml

from . import validators as val
from .targets import all_targets, target_specs
from .util import prompt

default_config_name = "makeship.toml"

backend_choices = ["il2cpp", "mono"]
backend_placeholders = ["target", "variant", "scenes", "output_path"]

target_section = val.Section(
    {
        "enabled": val.Bool(),
        "backends": val.List(val.Choice(*backend_choices), allow_empty=False),
        "channel": val.String(),
    }
)

config_params = {
    "name": val.String(),
    "organization": val.String(),
    "version_file": val.Path(),
    "build_directory": val.Path(),
    "versions_directory": val.Path(),
    "scenes": val.List(val.Path()),
    "backend": val.Section(
        {
            "command": val.CommandTemplate(*backend_placeholders),
            "probe": val.CommandTemplate(*backend_placeholders),
        }
    ),
    "butler": val.Section({"path": val.Path()}),
}
config_params.update({target: target_section for target in all_targets})


def load_config_file(path):
    try:
        with open(path) as f:
            config_data = toml.load(f)
    except toml.TomlDecodeError as exc:
        sys.exit("Could not parse config:\n{}".format(exc))
    validate_config(config_data)
    return config_data


def validate_config(config):
    try:
        val.Section(config_params).validate(config)
    except ValueError as exc:
        sys.exit("Could not parse config:\n{}".format(exc))


def guess_name():
    try:
        res = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"], capture_output=True
        )
    except OSError:
        return os.path.basename(os.getcwd())
    if res.returncode == 0:
        git_root_path = res.stdout.decode("utf-8").strip()
        return os.path.basename(git_root_path)
    else:
        return os.path.basename(os.getcwd())


def get_raw_config(config_path):
    if config_path != None:
        if not os.path.isfile(config_path):
            sys.exit("Config file '{}' does not exist".format(config_path))
        print("Loading config file '{}'".format(config_path))
        return load_config_file(config_path)
    else:
        if os.path.isfile(default_config_name):
            print("Loading config from default path '{}'".format(default_config_name))
            return load_config_file(default_config_name)
        else:
            print("No config file found. Using default config.")
            return {}


def apply_defaults(config):
    if not "name" in config:
        config["name"] = guess_name()
        print("Guessing project name as '{}'".format(config["name"]))
    if not "organization" in config:
        config["organization"] = config["name"]
        print("Using project name as organization '{}'".format(config["organization"]))
    if not "version_file" in config:
        config["version_file"] = "version.txt"
    if not "build_directory" in config:
        config["build_directory"] = "Builds"
        print("Using default build directory '{}'".format(config["build_directory"]))
    if not "versions_directory" in config:
        config["versions_directory"] = os.path.join(
            config["build_directory"], "versions"
        )
    if not "scenes" in config:
        config["scenes"] = []
    return config


def get_config(config_path):
    config = apply_defaults(get_raw_config(config_path))
    validate_config(config)
    return config


init_config_template = """name = {name}
organization = {organization}
version_file = {version_file}
build_directory = {build_directory}

scenes = [
{scenes}
]

[backend]
# {{target}}, {{variant}}, {{scenes}} and {{output_path}} are replaced before running
command = {command}
{targets}"""

init_target_template = """
[{name}]
enabled = {enabled}
backends = [{backends}]
"""

default_backend_command = (
    "unity -quit -batchmode -projectPath . -executeMethod MakeshipBuild.Build"
    ' -buildTarget {target} -- --backend {variant} --scenes "{scenes}"'
    ' --output "{output_path}"'
)


def find_scenes(root="Assets"):
    scenes = []
    for dirpath, _dirs, files in os.walk(root):
        for f in files:
            if f.endswith(".unity"):
                scenes.append(os.path.join(dirpath, f).replace(os.sep, "/"))
    return sorted(scenes)


def init_config_assistant():
    if os.path.isfile(default_config_name):
        sys.exit("{} already exists in this directory".format(default_config_name))

    name = prompt("Game title", guess_name())
    organization = prompt("itch.io user or organization", name)
    build_directory = prompt("Build directory", "Builds")
    version_file = prompt("Version file", "version.txt")
    scenes = find_scenes()
    if scenes:
        print("Found scenes: {}".format(", ".join(scenes)))

    quote = lambda x: '"' + x.replace("\\", "\\\\").replace('"', '\\"') + '"'
    targets = "".join(
        init_target_template.format(
            name=spec.name,
            enabled="true" if spec.default_enabled else "false",
            backends=", ".join(map(quote, spec.backends)),
        )
        for spec in target_specs
    )
    config = init_config_template.format(
        name=quote(name),
        organization=quote(organization),
        version_file=quote(version_file),
        build_directory=quote(build_directory),
        scenes="\n".join("    " + quote(scene) + "," for scene in scenes),
        command=quote(default_backend_command),
        targets=targets,
    )

    with open(default_config_name, "w") as f:
        f.write(config)
    print("Configuration written to {}".format(default_config_name))
    print("You should probably adjust the backend command before you build.")
