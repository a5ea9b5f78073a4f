"""
Multiwallet CLI - create the seed record, show balances and send coins.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from loguru import logger

from multiwallet.config import CliSettings, load_config
from multiwallet.errors import WalletError
from multiwallet.wallet.seed import SeedVault, generate_mnemonic
from multiwallet.providers import EthereumTokenProvider
from multiwallet.wallet.service import MultiWallet, check_network

app = typer.Typer(
    name="multiwallet",
    help="Multi-currency wallet for Bitcoin, Ethereum and ERC-20 tokens",
    add_completion=False,
)

BALANCE_COMMAND = 1
SEND_COMMAND = 2


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def open_wallet(config_file: Path | None, password: str | None) -> MultiWallet:
    settings = CliSettings()
    config = load_config(config_file or settings.config)
    check_network(config.network)

    if password is None:
        password = settings.password
        vault = SeedVault(config.seed_file)
        if not password and vault.load().is_encrypted:
            password = typer.prompt("Enter seed encryption password", hide_input=True)

    return MultiWallet.from_config(config, password)


def show_balance(wallet: MultiWallet, coin: str) -> None:
    typer.echo(f"Coin: {coin}")
    provider = wallet.get_provider(coin)
    if isinstance(provider, EthereumTokenProvider):
        typer.echo(f"Token: {provider.token_symbol()} ({provider.token_address})")
    typer.echo(f"Current address: {wallet.get_address(coin)}")
    typer.echo(f"Balance: {wallet.get_balance(coin)}")


def send_transaction(wallet: MultiWallet, coin: str, address: str, amount: str) -> None:
    show_balance(wallet, coin)
    typer.echo(f"Recipient: {address}")
    typer.echo(f"Amount: {amount}")

    txid = wallet.send(coin, address, amount)
    typer.echo(f"Tx: {txid}")


@app.command()
def create(
    seed_file: Path | None = typer.Option(
        None, "--seed-file", "-s", help="Seed record path (default: from config)"
    ),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    generate: bool = typer.Option(False, "--generate", "-g", help="Generate a new mnemonic"),
    word_count: int = typer.Option(24, "--words", "-w", help="Number of words (12 or 24)"),
    log_level: str = typer.Option("INFO", "--log-level", "-l"),
) -> None:
    """Create the master seed record from a BIP39 mnemonic."""
    setup_logging(log_level)

    try:
        if seed_file is None:
            seed_file = load_config(config_file or CliSettings().config).seed_file

        vault = SeedVault(seed_file)
        if vault.exists():
            typer.confirm(f"Seed file {seed_file} already exists. Overwrite?", abort=True)

        if generate:
            mnemonic = generate_mnemonic(word_count)
            typer.echo("\n" + "=" * 80)
            typer.echo("GENERATED MNEMONIC - WRITE THIS DOWN AND KEEP IT SAFE!")
            typer.echo("=" * 80)
            typer.echo(f"\n{mnemonic}\n")
            typer.echo("=" * 80 + "\n")
        else:
            mnemonic = typer.prompt("Enter mnemonic", hide_input=True)

        password = typer.prompt(
            "Enter seed encryption password",
            default="",
            hide_input=True,
            show_default=False,
        )
        if not password:
            typer.echo("Warning! Seed is not encrypted!")

        vault.generate(mnemonic, password)
        typer.echo(f"Seed saved to: {seed_file}")

    except (WalletError, ValueError) as e:
        logger.error(f"Failed to create seed: {e}")
        raise typer.Exit(1)


@app.command()
def address(
    coin: str = typer.Option(..., "--coin", help="Currency label from the config"),
    config_file: Path | None = typer.Option(None, "--config", "-c"),
    password: str | None = typer.Option(None, "--password", "-p", help="Seed password"),
    log_level: str = typer.Option("INFO", "--log-level", "-l"),
) -> None:
    """Show the receive address for a currency."""
    setup_logging(log_level)

    try:
        wallet = open_wallet(config_file, password)
        try:
            typer.echo(wallet.get_address(coin))
        finally:
            wallet.close()
    except WalletError as e:
        logger.error(str(e))
        raise typer.Exit(1)


@app.command()
def balance(
    coin: str = typer.Option(..., "--coin", help="Currency label from the config"),
    config_file: Path | None = typer.Option(None, "--config", "-c"),
    password: str | None = typer.Option(None, "--password", "-p", help="Seed password"),
    log_level: str = typer.Option("INFO", "--log-level", "-l"),
) -> None:
    """Show address and balance for a currency."""
    setup_logging(log_level)

    try:
        wallet = open_wallet(config_file, password)
        try:
            show_balance(wallet, coin)
        finally:
            wallet.close()
    except WalletError as e:
        logger.error(str(e))
        raise typer.Exit(1)


@app.command()
def send(
    coin: str = typer.Option(..., "--coin", help="Currency label from the config"),
    recipient: str = typer.Option(..., "--address", "-a", help="Recipient address"),
    amount: str = typer.Option(..., "--amount", help="Amount in whole units (e.g. 0.001)"),
    config_file: Path | None = typer.Option(None, "--config", "-c"),
    password: str | None = typer.Option(None, "--password", "-p", help="Seed password"),
    log_level: str = typer.Option("INFO", "--log-level", "-l"),
) -> None:
    """Send coins or tokens to an address."""
    setup_logging(log_level)

    try:
        wallet = open_wallet(config_file, password)
        try:
            send_transaction(wallet, coin, recipient, amount)
        finally:
            wallet.close()
    except WalletError as e:
        logger.error(str(e))
        raise typer.Exit(1)


@app.command()
def interactive(
    config_file: Path | None = typer.Option(None, "--config", "-c"),
    password: str | None = typer.Option(None, "--password", "-p", help="Seed password"),
    log_level: str = typer.Option("INFO", "--log-level", "-l"),
) -> None:
    """Interactive balance/send prompt."""
    setup_logging(log_level)

    try:
        wallet = open_wallet(config_file, password)
    except WalletError as e:
        logger.error(str(e))
        raise typer.Exit(1)

    try:
        typer.echo(f"Configured coins: {', '.join(wallet.currencies())}")
        while True:
            command = typer.prompt(
                "Enter command:\n1: get balance\n2: send transaction\n3: exit\n", type=int
            )

            try:
                if command == BALANCE_COMMAND:
                    show_balance(wallet, typer.prompt("Enter coin"))
                elif command == SEND_COMMAND:
                    coin = typer.prompt("Enter coin")
                    recipient = typer.prompt("Enter recipient address")
                    amount = typer.prompt("Enter amount")
                    send_transaction(wallet, coin, recipient, amount)
                else:
                    break
            except WalletError as e:
                typer.echo(f"Error: {e}")
    finally:
        wallet.close()


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
