import os
import shutil
import zipfile

excluded_folder_templates = [
    "{game}_BackUpThisFolder_ButDontShipItWithYourGame",
    "{game}_BurstDebugInformation_DoNotShip",
]


def files_in_dir(dir_path):
    ret = []
    for root, _dirs, files in os.walk(dir_path):
        for f in files:
            ret.append(os.path.join(root, f))
    return ret


def get_versioned_name(game, platform_label, version):
    return "{}_{}_{}.zip".format(game, platform_label, version)


def remove_if_exists(path):
    if os.path.isfile(path) or os.path.islink(path):
        os.remove(path)


class Artifact(object):
    def __init__(self, path, game, platform_label, version, channel):
        self.path = path
        self.game = game
        self.platform_label = platform_label
        self.version = str(version)
        self.channel = channel
        self.versioned_path = None

    @property
    def versioned_name(self):
        return get_versioned_name(self.game, self.platform_label, self.version)

    def __repr__(self):
        return "Artifact({!r}, channel={!r}, version={!r})".format(
            self.path, self.channel, self.version
        )


class ArtifactPackager(object):
    def __init__(self, game, versions_directory, verbose=False):
        self.game = game
        self.versions_directory = versions_directory
        self.verbose = verbose
        self.excluded_folders = [
            template.format(game=game) for template in excluded_folder_templates
        ]

    # Substring match on the whole entry name, not per path segment.
    # A file called "{game}_BurstDebugInformation_DoNotShip.txt" is skipped too.
    def is_excluded(self, entry_name):
        return any(folder in entry_name for folder in self.excluded_folders)

    def create_zip(self, source_dir, destination):
        if not os.path.isdir(source_dir):
            raise FileNotFoundError(
                "Cannot package '{}': directory does not exist".format(source_dir)
            )

        remove_if_exists(destination)
        dest_dir = os.path.dirname(destination)
        if dest_dir:
            os.makedirs(dest_dir, exist_ok=True)

        count = 0
        with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in sorted(files_in_dir(source_dir)):
                entry_name = os.path.relpath(path, source_dir).replace(os.sep, "/")
                if self.is_excluded(entry_name):
                    if self.verbose:
                        print("Skipping {}".format(entry_name))
                    continue
                if self.verbose:
                    print(entry_name)
                zf.write(path, arcname=entry_name)
                count += 1
        print("Created zip file at {} ({} files)".format(destination, count))

    def package(self, source_dir, destination, platform_label, version, channel):
        self.create_zip(source_dir, destination)
        artifact = Artifact(destination, self.game, platform_label, version, channel)

        os.makedirs(self.versions_directory, exist_ok=True)
        versioned_path = os.path.join(self.versions_directory, artifact.versioned_name)
        remove_if_exists(versioned_path)
        shutil.copyfile(destination, versioned_path)
        artifact.versioned_path = versioned_path
        print("Copied versioned archive to {}".format(versioned_path))
        return artifact
