class MakeshipError(Exception):
    pass


class FormatError(MakeshipError, ValueError):
    """Raised when a version string is not exactly three dot-separated integers."""


class ConfigError(MakeshipError):
    pass


class BuildBackendError(MakeshipError):
    """A native build failed for a target/backend variant pair."""

    def __init__(self, target, variant, detail):
        super().__init__(
            "Build for {} with {} failed: {}".format(target, variant, detail)
        )
        self.target = target
        self.variant = variant
        self.detail = detail


class UploadError(MakeshipError):
    pass
