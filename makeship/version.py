import os
import re
from collections import namedtuple

from .errors import FormatError

default_version = "0.1.0"

_version_regex = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)")


class Version(namedtuple("Version", ["major", "minor", "patch"])):
    __slots__ = ()

    @classmethod
    def parse(cls, version_str):
        m = _version_regex.fullmatch(str(version_str))
        if not m:
            raise FormatError(
                "Version format is incorrect: '{}'. Expected format: X.Y.Z".format(
                    version_str
                )
            )
        return cls(*map(int, m.groups()))

    def __str__(self):
        return "{}.{}.{}".format(self.major, self.minor, self.patch)


class VersionStore(object):
    """Keeps the project version in a plain text file.

    The file holds nothing but the version string and is rewritten wholesale on
    every save. `last_saved` is the value that is currently on disk, so callers
    can use `sync` to persist edits made to a live version.
    """

    def __init__(self, path):
        self.path = path
        self.last_saved = None

    def load(self):
        if not os.path.isfile(self.path):
            print(
                "No version file at '{}'. Starting at {}".format(
                    self.path, default_version
                )
            )
            version = Version.parse(default_version)
            self.save(version)
            return version

        with open(self.path) as f:
            version = Version.parse(f.read().strip())
        self.last_saved = version
        return version

    def save(self, version):
        version = Version.parse(version)
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w") as f:
            f.write(str(version))
        self.last_saved = version

    def sync(self, version):
        version = Version.parse(version)
        if version == self.last_saved:
            return False
        self.save(version)
        return True

    # The patch component is reset on every minor bump
    def increment_minor(self, version):
        current = Version.parse(version)
        bumped = Version(current.major, current.minor + 1, 0)
        self.save(bumped)
        return bumped

    def increment_patch(self, version):
        current = Version.parse(version)
        bumped = Version(current.major, current.minor, current.patch + 1)
        self.save(bumped)
        return bumped
