import os

import appdirs
import toml

butler_path_key = "butler_path"


def get_default_prefs_path():
    return os.path.join(appdirs.user_config_dir("makeship"), "preferences.toml")


class PreferenceStore(object):
    """Per-user key-value settings, persisted as TOML on every change."""

    def __init__(self, path=None):
        self.path = path or get_default_prefs_path()
        if os.path.isfile(self.path):
            with open(self.path) as f:
                self.values = toml.load(f)
        else:
            self.values = {}

    def get(self, key, default=None):
        return self.values.get(key, default)

    def set(self, key, value):
        self.values[key] = value
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        with open(self.path, "w") as f:
            toml.dump(self.values, f)
