"""
Integration tests for the privnet CLI.
"""

import pytest
from click.testing import CliRunner

from privnet.cli.main import cli
from privnet.core.chain import load_chain


@pytest.fixture
def env(tmp_path):
    return {
        "PRIVNET_DATA_DIR": str(tmp_path / "data"),
        "PRIVNET_LOCK_DIR": str(tmp_path / "locks"),
    }


@pytest.fixture
def descriptor(tmp_path):
    return tmp_path / "test.privnet.json"


@pytest.fixture
def invoke(env, descriptor):
    runner = CliRunner()

    def _invoke(*args):
        return runner.invoke(cli, ["--input", str(descriptor), *args], env=env)

    return _invoke


class TestCreateCommand:
    """Tests for `privnet create`."""

    def test_create(self, invoke, descriptor):
        result = invoke("create", "--count", "4")
        assert result.exit_code == 0, result.output
        assert "Created 4 node privatenet" in result.output
        assert "not* encrypted" in result.output
        assert len(load_chain(descriptor).consensus_nodes) == 4

    def test_invalid_count(self, invoke, descriptor):
        result = invoke("create", "--count", "2")
        assert result.exit_code != 0
        assert not descriptor.exists()

    def test_existing_requires_force(self, invoke, descriptor):
        assert invoke("create").exit_code == 0
        magic = load_chain(descriptor).magic

        result = invoke("create")
        assert result.exit_code != 0
        assert load_chain(descriptor).magic == magic

        assert invoke("create", "--force", "--count", "7").exit_code == 0
        assert len(load_chain(descriptor).consensus_nodes) == 7


class TestWalletCommands:
    """Tests for `privnet wallet`."""

    def test_create_wallet(self, invoke, descriptor):
        invoke("create")
        result = invoke("wallet", "create", "alice")
        assert result.exit_code == 0, result.output
        assert [w.name for w in load_chain(descriptor).wallets] == ["alice"]

        listing = invoke("wallet", "list")
        assert "node1" in listing.output
        assert "alice" in listing.output

    @pytest.mark.parametrize("name", ["Genesis", "NODE1"])
    def test_reserved_name(self, invoke, descriptor, name):
        invoke("create")
        result = invoke("wallet", "create", name)
        assert result.exit_code != 0
        assert "reserved" in result.output
        assert load_chain(descriptor).wallets == []

    def test_missing_descriptor(self, invoke):
        result = invoke("wallet", "create", "alice")
        assert result.exit_code != 0
        assert "not found" in result.output


class TestShowPorts:
    """Tests for `privnet show ports`."""

    def test_corrupt_descriptor(self, invoke, descriptor):
        descriptor.write_text("{not json")
        result = invoke("show", "ports")
        assert result.exit_code == 1
        assert "is not a valid descriptor" in result.output

    def test_ports(self, invoke, descriptor):
        invoke("create", "--count", "4")
        chain = load_chain(descriptor)
        result = invoke("show", "ports")
        assert result.exit_code == 0
        for node in chain.consensus_nodes:
            assert f"rpc={node.rpc_port}" in result.output


class TestCheckpointCommands:
    """Tests for `privnet checkpoint` and `privnet reset`."""

    def test_create_and_restore(self, invoke, tmp_path):
        invoke("create")
        name = str(tmp_path / "cp")

        created = invoke("checkpoint", "create", name)
        assert created.exit_code == 0, created.output
        assert "offline" in created.output
        assert (tmp_path / "cp.privnet-checkpoint").exists()

        refused = invoke("checkpoint", "restore", name)
        assert refused.exit_code != 0
        assert "force" in refused.output

        restored = invoke("checkpoint", "restore", name, "--force")
        assert restored.exit_code == 0, restored.output

    def test_multi_node_rejected(self, invoke, tmp_path):
        invoke("create", "--count", "4")
        result = invoke("checkpoint", "create", str(tmp_path / "cp"))
        assert result.exit_code != 0
        assert "single node" in result.output

    def test_reset(self, invoke, tmp_path):
        invoke("create")
        assert "has no data" in invoke("reset", "0").output

        invoke("checkpoint", "create", str(tmp_path / "cp"))
        assert invoke("reset", "0").exit_code != 0
        result = invoke("reset", "0", "--force")
        assert result.exit_code == 0
        assert "Reset node 0" in result.output
