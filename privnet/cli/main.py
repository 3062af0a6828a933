"""
privnet CLI - Command Line Interface for private network management

Main entry point for all CLI commands.
"""

import functools
from pathlib import Path

import click
from pydantic import ValidationError

from privnet.core.chain import (
    ChainDescriptor,
    create_chain,
    create_network,
    create_wallet,
    get_multisig_account,
    load_chain,
    save_chain,
)
from privnet.core.config import load_config
from privnet.core.errors import PrivnetError
from privnet.utils.logger import get_logger, setup_logging

logger = get_logger("cli")

DEFAULT_DESCRIPTOR = "default.privnet.json"


def handle_errors(func):
    """Report PrivnetError as a CLI failure instead of a traceback."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PrivnetError as err:
            logger.debug(f"{func.__name__} failed: {err!r}")
            raise click.ClickException(err.message) from err
    return wrapper


def load_descriptor(ctx) -> ChainDescriptor:
    path = ctx.obj["input"]
    if not path.exists():
        raise click.ClickException(f"{path} not found. Create it with: privnet create")
    try:
        return load_chain(path)
    except (ValueError, ValidationError) as err:
        logger.debug(f"Failed to load {path}: {err}")
        raise click.ClickException(f"{path} is not a valid descriptor") from err


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--input", "input_path", default=DEFAULT_DESCRIPTOR, help="Chain descriptor file")
@click.option("--env-file", default=None, help="Optional .env file with PRIVNET_* settings")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, input_path, env_file):
    """Private blockchain network bootstrap and checkpoint toolkit"""
    import logging

    level = logging.DEBUG if debug else logging.INFO
    setup_logging(level=level)

    ctx.ensure_object(dict)
    ctx.obj["input"] = Path(input_path).expanduser()
    ctx.obj["config"] = load_config(env_file)


# =============================================================================
# Network Commands
# =============================================================================


@cli.command("create")
@click.option("--count", "-c", default=1, type=int, help="Number of consensus nodes (1, 4 or 7)")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing descriptor file")
@click.pass_context
@handle_errors
def create(ctx, count, force):
    """Create a new private network descriptor"""
    output = ctx.obj["input"]
    base_port = ctx.obj["config"].base_port
    if force:
        chain = create_chain(count, base_port)
        save_chain(chain, output)
    else:
        chain = create_network(count, output, base_port=base_port)

    click.echo(f"Created {count} node privatenet at {output}")
    click.echo(f"  Magic: {chain.magic}")
    click.echo(f"  Genesis: {get_multisig_account(chain.consensus_nodes[0]).script_hash}")
    click.echo("  Note: The private keys for the accounts in this file are *not* encrypted.")
    click.echo("        Do not use these accounts on MainNet or anywhere security is a concern.")


@cli.group()
def show():
    """Show information about the network"""
    pass


@show.command("ports")
@click.pass_context
def show_ports(ctx):
    """Show the ports of every consensus node"""
    chain = load_descriptor(ctx)
    for i, node in enumerate(chain.consensus_nodes):
        click.echo(
            f"  {i}: {node.wallet.name} tcp={node.tcp_port} ws={node.ws_port} rpc={node.rpc_port}"
        )


@cli.command("reset")
@click.argument("index", type=int, default=0)
@click.option("--force", "-f", is_flag=True, help="Delete existing node data")
@click.pass_context
@handle_errors
def reset(ctx, index, force):
    """Delete the blockchain data of a consensus node"""
    from privnet.core.node.runner import NodeRunner

    chain = load_descriptor(ctx)
    runner = NodeRunner(config=ctx.obj["config"])
    if runner.reset_node(chain, index, force=force):
        click.echo(f"Reset node {index}")
    else:
        click.echo(f"Node {index} has no data")


# =============================================================================
# Wallet Commands
# =============================================================================


@cli.group()
def wallet():
    """Wallet management commands"""
    pass


@wallet.command("create")
@click.argument("name")
@click.pass_context
@handle_errors
def wallet_create(ctx, name):
    """Create a new wallet in the descriptor"""
    chain = load_descriptor(ctx)
    new_wallet = create_wallet(chain, name)
    chain.wallets.append(new_wallet)
    save_chain(chain, ctx.obj["input"])

    click.echo(f"✓ Wallet created: {name}")
    click.echo(f"  Address: {new_wallet.default_account.script_hash}")


@wallet.command("list")
@click.pass_context
def wallet_list(ctx):
    """List all wallets"""
    chain = load_descriptor(ctx)
    for w in chain.all_wallets():
        click.echo(f"  {w.name}: {w.default_account.script_hash}")


# =============================================================================
# Checkpoint Commands
# =============================================================================


@cli.group()
def checkpoint():
    """Checkpoint commands (single node networks only)"""
    pass


@checkpoint.command("create")
@click.argument("name", required=False)
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing checkpoint file")
@click.pass_context
@handle_errors
def checkpoint_create(ctx, name, force):
    """Create a checkpoint of the running or stopped node"""
    from privnet.core.checkpoint import CheckpointEngine, resolve_checkpoint_path

    chain = load_descriptor(ctx)
    path = resolve_checkpoint_path(name)
    if force and path.exists():
        path.unlink()

    result = CheckpointEngine(config=ctx.obj["config"]).create_checkpoint(chain, path)
    click.echo(f"Created {result.path.name} checkpoint {result.mode.value}")


@checkpoint.command("restore")
@click.argument("name")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing node data")
@click.pass_context
@handle_errors
def checkpoint_restore(ctx, name, force):
    """Restore a checkpoint into the node's data directory"""
    from privnet.core.checkpoint import CheckpointEngine, resolve_checkpoint_path

    chain = load_descriptor(ctx)
    path = resolve_checkpoint_path(name)
    if not path.exists():
        raise click.ClickException(f"Checkpoint {path} not found")

    data_path = CheckpointEngine(config=ctx.obj["config"]).restore_checkpoint(chain, path, force=force)
    click.echo(f"Checkpoint {path.name} successfully restored to {data_path}")


if __name__ == "__main__":
    cli()
