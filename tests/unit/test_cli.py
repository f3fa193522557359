from pathlib import Path
from unittest import mock

import pytest

from nad_provisioner.errors import ClientError, ConfigurationError
from nadctl.config import load_job_file
from nadctl.main import main


def test_load_job_file(tmp_path: Path):
    job_path = tmp_path / "job.yaml"
    job_path.write_text(
        """
prefix: vlan
range: 100-200
namespace: tenant-a
labels:
  env: prod
  tier: 1
mtu: 9000
jobs: 4
"""
    )

    values = load_job_file(job_path)

    assert values == {
        "prefix": "vlan",
        "range": "100-200",
        "namespace": "tenant-a",
        "labels": {"env": "prod", "tier": "1"},
        "mtu": "9000",
        "jobs": "4",
    }


def test_load_job_file_rejects_unknown_keys(tmp_path: Path):
    job_path = tmp_path / "job.yaml"
    job_path.write_text("prefix: vlan\nvlans: 1-2\n")

    with pytest.raises(ConfigurationError):
        load_job_file(job_path)


def test_load_job_file_rejects_non_mapping(tmp_path: Path):
    job_path = tmp_path / "job.yaml"
    job_path.write_text("- vlan\n")

    with pytest.raises(ConfigurationError):
        load_job_file(job_path)


def test_load_empty_job_file(tmp_path: Path):
    job_path = tmp_path / "job.yaml"
    job_path.write_text("")

    assert load_job_file(job_path) == {}


def test_dry_run_never_needs_a_cluster_cli(capsys):
    with mock.patch("nad_provisioner.clients.kubectl.shutil.which", return_value=None):
        code = main(
            ["bridge", "-p", "nic1-vlan", "-r", "1-100", "-b", "br0", "-l", "env=test", "-t"]
        )

    out = capsys.readouterr().out
    assert code == 0
    assert "Using command: none (dry run)" in out
    assert "... (remaining 95 templates would be similar)" in out


def test_configuration_error_exits_with_one(capsys):
    assert main(["localnet", "-p", "vlan", "-r", "10-5", "-l", "a=1", "-t"]) == 1
    assert main(["localnet", "-p", "vlan", "-r", "1-5", "-l", "a=1", "-m", "20", "-t"]) == 1
    assert main(["bridge", "-p", "vlan", "-r", "1-5", "-l", "a=1", "-t"]) == 1
    assert "SUCCESS" not in capsys.readouterr().out


def test_missing_cluster_cli_is_fatal():
    with mock.patch("nad_provisioner.clients.kubectl.shutil.which", return_value=None):
        assert main(["localnet", "-p", "vlan", "-r", "1-5", "-D"]) == 1


def test_cli_flags_override_job_file(tmp_path: Path, capsys):
    job_path = tmp_path / "job.yaml"
    job_path.write_text("prefix: from-file\nrange: 1-2\nlabels: env=file\n")

    code = main(["localnet", "-c", str(job_path), "-p", "from-cli", "-t"])

    out = capsys.readouterr().out
    assert code == 0
    assert "name: from-cli1" in out
    assert 'env: "file"' in out


def test_live_run_exit_code_follows_verdict(capsys):
    client = mock.Mock()
    client.name = "oc"

    with mock.patch("nadctl.main.KubectlClient", return_value=client):
        code = main(["localnet", "-p", "vlan", "-r", "1-3", "-l", "env=prod", "-j", "1"])

    assert code == 0
    assert client.upsert.call_count == 3
    out = capsys.readouterr().out
    assert "Using command: oc" in out
    assert "Process completed successfully!" in out


def test_live_run_with_failed_item_exits_with_one(capsys):
    client = mock.Mock()
    client.name = "kubectl"
    client.exists.return_value = True
    client.delete.side_effect = ClientError("delete", "vlan1", "default", "forbidden")

    with mock.patch("nadctl.main.KubectlClient", return_value=client):
        code = main(["bridge", "-p", "vlan", "-r", "1-1", "-D"])

    assert code == 1
    assert "Delete process completed with some errors." in capsys.readouterr().out


def test_create_job_file_can_be_reused_for_delete(tmp_path: Path, capsys):
    job_path = tmp_path / "job.yaml"
    job_path.write_text("prefix: vlan\nrange: 1-3\nlabels: env=prod\nmtu: 9000\n")

    assert main(["localnet", "-c", str(job_path), "-t"]) == 0
    assert main(["localnet", "-c", str(job_path), "-D", "-t"]) == 0

    out = capsys.readouterr().out
    assert "DRY RUN DELETE MODE - Would delete localnet NADs from vlan1 to vlan3" in out


def test_create_only_flag_on_command_line_is_rejected_for_delete(capsys):
    assert main(["localnet", "-p", "vlan", "-r", "1-3", "-m", "9000", "-D", "-t"]) == 1
    assert "Would delete" not in capsys.readouterr().out


def test_cli_can_reenable_mac_spoof_check(tmp_path: Path, capsys):
    job_path = tmp_path / "job.yaml"
    job_path.write_text(
        "prefix: vlan\nrange: 1-1\nlabels: env=prod\nbridge: br0\nmac_spoof_check: false\n"
    )

    assert main(["bridge", "-c", str(job_path), "-t"]) == 0
    assert "MAC spoof check: false" in capsys.readouterr().out

    assert main(["bridge", "-c", str(job_path), "--mac-spoof-check", "-t"]) == 0
    assert "MAC spoof check: true" in capsys.readouterr().out


def test_mac_spoof_check_flags_are_exclusive():
    with pytest.raises(SystemExit):
        main(["bridge", "-p", "vlan", "-r", "1-1", "-b", "br0", "-l", "a=1", "-M", "--mac-spoof-check"])


def test_non_ascii_digits_exit_with_one():
    assert main(["localnet", "-p", "vlan", "-r", "1-3", "-l", "a=1", "-j", "²", "-t"]) == 1
