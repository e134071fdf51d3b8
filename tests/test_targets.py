import os

import pytest

from fakes import FakeBackend, FakePublisher
from makeship.errors import UploadError
from makeship.packager import ArtifactPackager
from makeship.targets import BuildTarget, all_targets, get_target_spec


def windows(**kwargs):
    return BuildTarget(get_target_spec("windows"), **kwargs)


def test_default_selection():
    enabled = [
        name for name in all_targets if BuildTarget(get_target_spec(name)).enabled
    ]
    assert enabled == ["windows"]


def test_from_config_overrides():
    target = BuildTarget.from_config(
        get_target_spec("linux"),
        {"linux": {"enabled": True, "backends": ["mono"], "channel": "linux-beta"}},
    )
    assert target.enabled
    assert target.backends == ["mono"]
    assert target.channel == "linux-beta"


def test_from_config_defaults():
    target = BuildTarget.from_config(get_target_spec("webgl"), {})
    assert not target.enabled
    assert target.backends == ["mono"]
    assert target.channel == "WebGL"


def test_mac_requires_mac_host():
    mac = BuildTarget(get_target_spec("mac"))
    assert mac.is_available("darwin")
    assert not mac.is_available("linux")
    assert windows().is_available("linux")


def test_output_paths(tmp_path):
    target = windows()
    assert target.get_output_directory("Cool", "Builds") == os.path.join(
        "Builds", "Cool_StandaloneWindows64"
    )
    assert target.get_output_path("Cool", "Builds") == os.path.join(
        "Builds", "Cool_StandaloneWindows64", "Cool.exe"
    )
    assert BuildTarget(get_target_spec("mac")).get_output_path("Cool", "B").endswith(
        "MacBuild.app"
    )


def test_build_uses_first_installed_backend(tmp_path):
    backend = FakeBackend(installed={"portable"})
    target = windows(backends=["fast", "portable"])
    result = target.build(backend, "Cool", ["Main.unity"], str(tmp_path))

    assert result.success
    assert result.variant == "portable"
    assert [b[1] for b in backend.builds] == ["portable"]
    assert os.path.isfile(os.path.join(result.output_directory, "Cool.exe"))


def test_build_falls_back_after_failure(tmp_path):
    backend = FakeBackend(failing={("StandaloneWindows64", "il2cpp")})
    result = windows().build(backend, "Cool", [], str(tmp_path))
    assert result.success
    assert result.variant == "mono"
    assert [b[1] for b in backend.builds] == ["il2cpp", "mono"]


def test_build_fails_when_nothing_installed(tmp_path):
    result = windows().build(FakeBackend(installed=set()), "Cool", [], str(tmp_path))
    assert not result.success
    assert "Windows" in result.error
    assert "none of the backends [il2cpp, mono] are installed" in result.error
    # the fresh output directory exists even though nothing was built
    assert os.listdir(result.output_directory) == []


def test_build_fails_when_all_backends_fail(tmp_path):
    backend = FakeBackend(
        failing={("StandaloneWindows64", "il2cpp"), ("StandaloneWindows64", "mono")}
    )
    result = windows().build(backend, "Cool", [], str(tmp_path))
    assert not result.success
    assert "StandaloneWindows64 with il2cpp failed: compiler crashed" in result.error
    assert "StandaloneWindows64 with mono failed: compiler crashed" in result.error


def test_build_replaces_existing_output(tmp_path):
    target = windows()
    output_directory = target.get_output_directory("Cool", str(tmp_path))
    # a stray file where the output directory goes
    with open(output_directory, "w") as f:
        f.write("stale")

    result = target.build(FakeBackend(), "Cool", [], str(tmp_path))
    assert result.success
    assert sorted(os.listdir(output_directory)) == ["Cool.exe", "data.bin"]


def test_upload_packages_and_publishes(tmp_path):
    target = windows()
    result = target.build(FakeBackend(), "Cool", [], str(tmp_path))
    publisher = FakePublisher()
    packager = ArtifactPackager("Cool", str(tmp_path / "versions"))

    record = target.upload(result, packager, publisher, "0.4.0")

    assert record.success
    assert record.artifact.path == result.output_directory + ".zip"
    assert publisher.uploads == [(record.artifact.path, "windows", "0.4.0")]


def test_upload_refused_after_failed_build(tmp_path):
    target = windows()
    result = target.build(FakeBackend(installed=set()), "Cool", [], str(tmp_path))
    publisher = FakePublisher()
    with pytest.raises(UploadError):
        target.upload(result, ArtifactPackager("Cool", str(tmp_path)), publisher, "1.0.0")
    assert publisher.uploads == []


def test_publish_uses_target_channel(tmp_path):
    target = BuildTarget(get_target_spec("webgl"))
    result = target.build(FakeBackend(), "Cool", [], str(tmp_path))
    artifact = target.package(result, ArtifactPackager("Cool", str(tmp_path / "v")), "1.0.0")
    publisher = FakePublisher()

    record = target.publish(artifact, publisher, "1.0.0")

    assert record.artifact is artifact
    assert artifact.channel == "WebGL"
    assert publisher.uploads == [(artifact.path, "WebGL", "1.0.0")]
