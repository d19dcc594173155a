from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click
from loguru import logger

from underlying_yield.core.config import load_config
from underlying_yield.core.constants.symbols import SYMBOLS_BY_VARIANT
from underlying_yield.core.engine.aggregator import create_service


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


async def _collect(
    variant: str | None, rpc_url: str | None, details: bool
) -> dict[str, Any]:
    service = create_service(variant, rpc_url=rpc_url)
    try:
        if not details:
            return await service.get_underlying_apys()
        results = await service.get_yield_results()
        return {r.symbol: {"apy": r.apy, "source": str(r.source)} for r in results}
    finally:
        await service.close()


@click.group(name="underlying-yield", help="Underlying APYs of staking tokens.")
def cli() -> None:
    pass


@cli.command(name="apys", help="Compute the APY of every tracked token.")
@click.option(
    "--variant",
    type=click.Choice(sorted(SYMBOLS_BY_VARIANT)),
    default=None,
    help="Token set to report (defaults to yields.variant in config, else full).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a config.json.",
)
@click.option("--rpc-url", default=None, help="Ethereum JSON-RPC endpoint.")
@click.option(
    "--details/--no-details",
    default=False,
    show_default=True,
    help="Include the data source of each APY.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
def apys_cmd(
    variant: str | None,
    config_path: str | None,
    rpc_url: str | None,
    details: bool,
    log_level: str,
) -> None:
    logger.remove()
    logger.add(sys.stderr, level=str(log_level).upper())

    if config_path is not None:
        load_config(config_path, require_exists=True)

    try:
        data = asyncio.run(_collect(variant, rpc_url, details))
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(data)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
