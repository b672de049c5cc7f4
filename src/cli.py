"""Command line entry point: compute and print vault APYs."""

import argparse
import asyncio
import json
import logging
from typing import List, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from config.settings import get_settings
from src.analytics.engine import YieldEngine
from src.core.exceptions import MissingVaultIdentityError
from src.core.models import CachedVault, PoolProtocol, Vault
from src.protocols.overrides import OverrideTable
from src.protocols.yearn import VaultResolver

logger = logging.getLogger(__name__)

console = Console()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute the APY of Yearn v2 vaults")
    parser.add_argument("vaults", nargs="+", help="Vault addresses")
    parser.add_argument(
        "--protocol",
        choices=[p.value for p in PoolProtocol],
        default=PoolProtocol.CURVE.value,
        help="Protocol the vault tokens belong to",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--store", action="store_true", help="Persist results to the local store")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def render_table(records: List[CachedVault]) -> Table:
    table = Table(title="Vault APY")
    table.add_column("Vault")
    table.add_column("Token")
    table.add_column("Type")
    table.add_column("Recommended", justify="right")
    table.add_column("Breakdown")

    for record in records:
        apy = record.apy
        if apy is None:
            table.add_row(record.name or record.address, record.token.symbol, "-", "-", "")
            continue
        breakdown = ", ".join(f"{k}={v:.4f}" for k, v in apy.data.items())
        table.add_row(
            record.name or record.address,
            record.token.symbol,
            apy.type,
            f"{apy.recommended * 100:.2f}%",
            breakdown,
        )
    return table


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    engine = YieldEngine.from_settings(settings)
    resolver = VaultResolver(engine.reader, OverrideTable.load(settings.overrides_path), settings)
    protocol = PoolProtocol(args.protocol)

    try:
        vaults: List[Vault] = []
        for address in args.vaults:
            try:
                vaults.append(await resolver.resolve_vault(address, protocol))
            except MissingVaultIdentityError as e:
                console.print(f"[red]Skipping {address}: {e}[/red]")

        if args.store:
            records = await engine.refresh(vaults)
        else:
            apys = await engine.calculate_many(vaults)
            records = [CachedVault.from_vault(v, apys.get(v.address), 0) for v in vaults]
    finally:
        await engine.close()

    if args.json:
        console.print_json(json.dumps([r.to_dict() for r in records]))
    else:
        console.print(render_table(records))
    return 0 if len(records) == len(args.vaults) else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True))],
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
