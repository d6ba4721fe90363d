import pytest

from cqtool.core.errors import InstallError
from cqtool.installer import installer
from cqtool.installer.installer import InstallerConfig, install_instance, load_installer_config


@pytest.fixture
def config(tmp_path):
    return InstallerConfig(
        home_dir=tmp_path / "cq",
        mode="publish",
        jar_url="https://repo.example.com/dist/cq-quickstart-6.5.jar?x=1",
        license_url="https://repo.example.com/dist/license.properties",
    )


@pytest.fixture
def fake_io(monkeypatch):
    calls = {"downloads": [], "commands": []}

    def download(url, dest, timeout=None):
        calls["downloads"].append(url)
        dest.write_text("data")

    def run(command, cwd=None, timeout=None, user=None, group=None):
        calls["commands"].append(command)
        (cwd / installer.QUICKSTART_DIR).mkdir()
        return True, "", ""

    monkeypatch.setattr(installer, "download_file", download)
    monkeypatch.setattr(installer, "run_command", run)
    return calls


def test_install_fresh_instance(config, fake_io):
    report = install_instance(config)
    home = config.instance_home

    assert home.name == "publish"
    assert (home / "cq-quickstart-6.5.jar").exists()
    assert (home / "license.properties").exists()
    assert fake_io["commands"] == [["java", "-jar", "cq-quickstart-6.5.jar", "-unpack"]]
    assert len(report.performed) == 4
    assert report.skipped == []


def test_install_is_idempotent(config, fake_io):
    install_instance(config)
    report = install_instance(config)

    assert report.performed == []
    assert len(report.skipped) == 4
    assert len(fake_io["downloads"]) == 2
    assert len(fake_io["commands"]) == 1


def test_dry_run_changes_nothing(config, fake_io):
    report = install_instance(config, dry_run=True)

    assert len(report.performed) == 4
    assert not config.instance_home.exists()
    assert fake_io["downloads"] == []


def test_unpack_failure(config, monkeypatch, fake_io):
    monkeypatch.setattr(installer, "run_command", lambda *a, **k: (False, "", "no java"))
    with pytest.raises(InstallError, match="no java"):
        install_instance(config)


def test_load_installer_config(tmp_path):
    f = tmp_path / "installer.yaml"
    f.write_text(
        "home_dir: /opt/aem\n"
        "mode: author\n"
        "jar_url: http://x/aem.jar\n"
        "license_url: http://x/license.properties\n"
    )
    config = load_installer_config(f)
    assert str(config.instance_home) == "/opt/aem/author"
    assert config.jar_name == "aem.jar"
