"""Tests for host-specific settings file selection."""

from unittest.mock import patch

from volume_agent.utils.host_config import get_hostname_settings_file, list_all_settings_files


def test_host_file_created_from_base(tmp_path):
    (tmp_path / "volumes.env").write_text("VOLUME_MOUNT_BASE=/mnt/volumes\n")

    with patch("volume_agent.utils.host_config.get_hostname", return_value="backup01"):
        settings_file = get_hostname_settings_file(str(tmp_path))

    host_file = tmp_path / "backup01-volumes.env"
    assert settings_file == str(host_file)
    content = host_file.read_text()
    assert content.startswith("# Host-specific volume configuration for: backup01")
    assert "VOLUME_MOUNT_BASE=/mnt/volumes" in content


def test_existing_host_file_is_kept(tmp_path):
    (tmp_path / "volumes.env").write_text("A=1\n")
    (tmp_path / "backup01-volumes.env").write_text("A=2\n")

    with patch("volume_agent.utils.host_config.get_hostname", return_value="backup01"):
        settings_file = get_hostname_settings_file(str(tmp_path))

    assert (tmp_path / "backup01-volumes.env").read_text() == "A=2\n"
    assert settings_file.endswith("backup01-volumes.env")


def test_missing_base_file_falls_back(tmp_path):
    assert get_hostname_settings_file(str(tmp_path)) == str(tmp_path / "volumes.env")


def test_list_all_settings_files(tmp_path):
    (tmp_path / "volumes.env").write_text("")
    (tmp_path / "b-volumes.env").write_text("")
    (tmp_path / "a-volumes.env").write_text("")

    assert list_all_settings_files(str(tmp_path)) == [
        str(tmp_path / "volumes.env"),
        str(tmp_path / "a-volumes.env"),
        str(tmp_path / "b-volumes.env"),
    ]
