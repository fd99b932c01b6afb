"""
Sequestre CLI.

Usage:
    sequestre [--config CONFIG] [--verbose N] store [--force]
    sequestre setup
    sequestre init
    sequestre exchange [--amount AMOUNT]
    sequestre cancel
    sequestre show
"""

import sys

import click
from pydantic import ValidationError

from sequestre.config import load_config
from sequestre.domain.exceptions import SequestreException
from sequestre.infrastructure.blockchain import SolanaTransport
from sequestre.infrastructure.monitoring import SystemReporter
from sequestre.infrastructure.persistence import KeyStore


class Context:
    """Collaborators shared by every command of one invocation."""

    def __init__(self, config_file, verbose):
        self.config = load_config(config_file)
        self.reporter = SystemReporter.from_config(self.config, verbose=verbose)
        self.key_store = KeyStore(self.config.keys_dir)
        self._transport = None

    @property
    def transport(self) -> SolanaTransport:
        if self._transport is None:
            self._transport = SolanaTransport.from_config(self.config)
        return self._transport


def _run(ctx: Context, label: str, action):
    """Run a use case, turning domain errors into exit code 1."""
    try:
        return action()
    except SequestreException as e:
        ctx.reporter.error(f"{label} failed: {e.message}", context="CLI")
        if e.details:
            ctx.reporter.debug(f"Details: {e.details}", context="CLI")
        click.echo(f"{label} failed: {e.message}", err=True)
        sys.exit(1)


@click.group()
@click.option("--config", "-c", default=None, help="Config file")
@click.option(
    "--verbose",
    "-v",
    default=1,
    type=click.IntRange(0, 3),
    help="Verbosity (0-3)",
)
@click.pass_context
def cli(ctx, config, verbose):
    """Sequestre - Solana token escrow client."""
    try:
        ctx.obj = Context(config, verbose)
    except ValidationError as e:
        click.echo(f"Configuration failed: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--force", is_flag=True, help="Replace existing keypairs")
@click.pass_obj
def store(obj: Context, force):
    """Generate alice, bob and masterAccount keypairs."""
    from sequestre.application.use_cases import StoreKeypairs

    stored = _run(
        obj,
        "Store",
        lambda: StoreKeypairs(obj.key_store, obj.reporter).execute(force=force),
    )
    for nickname, pubkey in stored.items():
        click.echo(f"{nickname}: {pubkey}")


@cli.command()
@click.pass_obj
def setup(obj: Context):
    """Fund wallets, create test mints and token accounts."""
    from sequestre.application.use_cases import SetupTestTokens

    use_case = SetupTestTokens(obj.config, obj.key_store, obj.transport, obj.reporter)
    balances = _run(obj, "Setup", use_case.execute)
    for nickname, balance in balances.items():
        click.echo(f"{nickname}: {balance}")
    click.echo("Setup complete")


@cli.command()
@click.pass_obj
def init(obj: Context):
    """Initialize an escrow as alice."""
    from sequestre.application.use_cases import InitializeEscrow

    use_case = InitializeEscrow(
        obj.config, obj.key_store, obj.transport, obj.reporter
    )
    state = _run(obj, "Initialize", use_case.execute)
    click.echo(f"Escrow initialized: {state.escrow_account}")


@cli.command()
@click.option(
    "--amount",
    type=int,
    default=None,
    help="Base units bob expects to receive (default: configured deposit)",
)
@click.pass_obj
def exchange(obj: Context, amount):
    """Settle the stored escrow as bob."""
    from sequestre.application.use_cases import ExchangeEscrow

    use_case = ExchangeEscrow(obj.config, obj.key_store, obj.transport, obj.reporter)
    state = _run(obj, "Exchange", lambda: use_case.execute(amount=amount))
    if state is None:
        click.echo("Nothing to exchange")
    else:
        click.echo(f"Escrow settled: {state.signature}")


@cli.command()
@click.pass_obj
def cancel(obj: Context):
    """Cancel the stored escrow and refund alice."""
    from sequestre.application.use_cases import CancelEscrow

    use_case = CancelEscrow(obj.config, obj.key_store, obj.transport, obj.reporter)
    state = _run(obj, "Cancel", use_case.execute)
    if state is None:
        click.echo("Nothing to cancel")
    else:
        click.echo(f"Escrow cancelled: {state.signature}")


@cli.command()
@click.pass_obj
def show(obj: Context):
    """Show the stored escrow and token balances."""
    from sequestre.application.use_cases import ShowEscrow

    use_case = ShowEscrow(obj.config, obj.key_store, obj.transport, obj.reporter)
    record = _run(obj, "Show", use_case.execute)
    if record is None:
        click.echo("No escrow on-chain")


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
