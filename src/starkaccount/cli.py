"""Click CLI for starkaccount."""

import asyncio
import json as json_mod
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from starkaccount.account import Account
from starkaccount.calldata import get_selector_from_name
from starkaccount.config import (
    StarkAccountConfig,
    get_base_url,
    get_feeder_gateway_url,
    get_gateway_url,
    load_config,
)
from starkaccount.constants import TransactionStatus
from starkaccount.crypto import verify_signature
from starkaccount.errors import StarkAccountError
from starkaccount.number import to_hex, to_int
from starkaccount.provider import GatewayProvider
from starkaccount.signer import KeyPair, Signer
from starkaccount.transaction import Invocation, InvocationsDetails
from starkaccount.typed_data import get_message_hash


class _JsonFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record):
        return json_mod.dumps({
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(level: str, json_log: bool = False) -> None:
    if json_log:
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            handlers=[handler],
        )
    else:
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def build_provider(config: StarkAccountConfig) -> GatewayProvider:
    return GatewayProvider(
        base_url=get_base_url(config.network),
        feeder_gateway_url=get_feeder_gateway_url(config.network),
        gateway_url=get_gateway_url(config.network),
        timeout=config.network.timeout,
    )


def resolve_address(address: Optional[str], config: StarkAccountConfig) -> str:
    """Pick --address, falling back to account.address from the config file."""
    resolved = address or config.account.address
    if not resolved:
        raise click.UsageError("No account address given. Use --address or set "
                               "account.address in the config file.")
    return resolved


def load_typed_data(path: str) -> dict:
    try:
        with open(path) as f:
            return json_mod.load(f)
    except json_mod.JSONDecodeError as e:
        raise click.UsageError(f"{path} is not valid JSON: {e}")


async def _with_account(config, address, private_key, action):
    """Run ``action(account)`` with a provider that is closed afterwards."""
    async with build_provider(config) as provider:
        account = Account(provider, address, KeyPair.from_private_key(private_key))
        return await action(account)


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True),
              default=None, help="Path to config YAML file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--json-log", is_flag=True, help="Output logs in structured JSON format")
@click.pass_context
def cli(ctx, config_path, verbose, json_log):
    """starkaccount: sign and verify StarkNet account calls and messages."""
    ctx.ensure_object(dict)

    if config_path:
        config = load_config(Path(config_path))
    else:
        config = StarkAccountConfig()

    if verbose:
        config.log_level = "DEBUG"

    setup_logging(config.log_level, json_log=json_log)
    ctx.obj["config"] = config


@cli.command("selector")
@click.argument("name")
def selector(name):
    """Print the entrypoint selector for NAME."""
    click.echo(to_hex(get_selector_from_name(name)))


@cli.command("nonce")
@click.option("--address", "-a", default=None, help="Account contract address (0x...)")
@click.pass_context
def nonce(ctx, address):
    """Fetch the account's current nonce."""
    config = ctx.obj["config"]
    address = resolve_address(address, config)

    async def _fetch():
        async with build_provider(config) as provider:
            account = Account(provider, address)
            return await account.get_nonce()

    try:
        value = asyncio.run(_fetch())
    except StarkAccountError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(str(value))


@cli.command("hash-message")
@click.option("--address", "-a", default=None, help="Signing account address (0x...)")
@click.argument("typed_data_file", type=click.Path(exists=True))
@click.pass_context
def hash_message(ctx, address, typed_data_file):
    """Print the message hash of a typed data JSON file."""
    address = resolve_address(address, ctx.obj["config"])
    try:
        msg_hash = get_message_hash(load_typed_data(typed_data_file), address)
    except StarkAccountError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(to_hex(msg_hash))


@cli.command("sign-message")
@click.option("--address", "-a", default=None, help="Signing account address (0x...)")
@click.option("--private-key", prompt=True, hide_input=True,
              help="Hex-encoded STARK private key")
@click.argument("typed_data_file", type=click.Path(exists=True))
@click.pass_context
def sign_message(ctx, address, private_key, typed_data_file):
    """Sign a typed data JSON file with the account's key."""
    config = ctx.obj["config"]
    address = resolve_address(address, config)
    typed_data = load_typed_data(typed_data_file)
    try:
        signer = Signer(KeyPair.from_private_key(private_key))
        msg_hash = get_message_hash(typed_data, address)
        r, s = signer.sign_hash(msg_hash)
    except StarkAccountError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Hash: {to_hex(msg_hash)}")
    click.echo(f"r:    {to_hex(r)}")
    click.echo(f"s:    {to_hex(s)}")


@cli.command("verify-message")
@click.option("--address", "-a", default=None, help="Signing account address (0x...)")
@click.option("--signature", "-s", nargs=2, required=True,
              help="Signature components r and s")
@click.option("--public-key", default=None,
              help="Verify locally against this stark key instead of asking the account")
@click.argument("typed_data_file", type=click.Path(exists=True))
@click.pass_context
def verify_message(ctx, address, signature, public_key, typed_data_file):
    """Check a signature over a typed data JSON file."""
    config = ctx.obj["config"]
    address = resolve_address(address, config)
    typed_data = load_typed_data(typed_data_file)

    try:
        if public_key:
            msg_hash = get_message_hash(typed_data, address)
            valid = verify_signature(msg_hash, [to_int(v) for v in signature],
                                     to_int(public_key))
        else:
            async def _verify():
                async with build_provider(config) as provider:
                    account = Account(provider, address)
                    return await account.verify_message(typed_data, signature)
            valid = asyncio.run(_verify())
    except StarkAccountError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if valid:
        click.echo("Signature is valid.")
    else:
        click.echo("Signature is NOT valid.")
        sys.exit(1)


@cli.command("execute")
@click.option("--address", "-a", default=None, help="Account contract address (0x...)")
@click.option("--contract", required=True, help="Target contract address (0x...)")
@click.option("--entrypoint", "-e", required=True, help="Entrypoint name on the target")
@click.option("--calldata", "-d", multiple=True,
              help="Calldata element (repeat for each element)")
@click.option("--nonce", "nonce_override", default=None,
              help="Nonce override (fetched from the account if omitted)")
@click.option("--private-key", prompt=True, hide_input=True,
              help="Hex-encoded STARK private key")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def execute(ctx, address, contract, entrypoint, calldata, nonce_override,
            private_key, yes):
    """Sign and submit one call through the account's execute entrypoint."""
    config = ctx.obj["config"]
    address = resolve_address(address, config)

    try:
        invocation = Invocation.create(contract, entrypoint, list(calldata))
        details = InvocationsDetails(
            nonce=to_int(nonce_override) if nonce_override is not None else None
        )
    except StarkAccountError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Account:    {address}")
    click.echo(f"Contract:   {contract}")
    click.echo(f"Entrypoint: {entrypoint}")
    click.echo(f"Calldata:   {', '.join(calldata) or '(none)'}")
    click.echo()

    if not yes:
        if not click.confirm(f"Submit {entrypoint} on {contract}?", default=False):
            click.echo("Cancelled.")
            return

    async def _submit(account):
        return await account.execute(invocation, details=details)

    try:
        result = asyncio.run(_with_account(config, address, private_key, _submit))
    except StarkAccountError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Submitted! TX hash: {result.transaction_hash} ({result.code})")


@cli.command("status")
@click.argument("tx_hash")
@click.pass_context
def status(ctx, tx_hash):
    """Show the gateway status of a submitted transaction."""
    config = ctx.obj["config"]

    async def _status():
        async with build_provider(config) as provider:
            return await provider.get_transaction_status(tx_hash)

    try:
        result = asyncio.run(_status())
    except StarkAccountError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Status: {result.tx_status}")
    if result.block_hash:
        click.echo(f"Block:  {result.block_hash}")
    if result.tx_status == TransactionStatus.REJECTED:
        reason = (result.tx_failure_reason or {}).get("error_message", "unknown")
        click.echo(f"Rejected: {reason}", err=True)
        sys.exit(1)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
