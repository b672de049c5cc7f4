"""Unit tests for the command line entry point."""

from rich.console import Console

from src.cli import parse_args, render_table
from src.core.models import Apy, CachedVault, Token, VaultType


def make_record(apy=None) -> CachedVault:
    return CachedVault(
        address="0xvault",
        name="yvCurve-3pool",
        symbol="yv3Crv",
        token=Token(address="0xtoken", symbol="3Crv"),
        type=VaultType.V2,
        apy=apy,
        updated=0,
    )


class TestParseArgs:
    """Tests for parse_args."""

    def test_defaults(self):
        args = parse_args(["0xvault"])
        assert args.vaults == ["0xvault"]
        assert args.protocol == "curve"
        assert not args.json
        assert not args.store

    def test_flags(self):
        args = parse_args(["0xa", "0xb", "--protocol", "pps", "--json", "--store", "-v"])
        assert args.vaults == ["0xa", "0xb"]
        assert args.protocol == "pps"
        assert args.json and args.store and args.verbose


class TestRenderTable:
    """Tests for render_table."""

    def render(self, table) -> str:
        console = Console(width=200, record=True)
        console.print(table)
        return console.export_text()

    def test_row_per_record(self):
        apy = Apy(0.0523, "curve", True, "Pool APY + Boosted CRV APY", {"netApy": 0.0523})
        table = render_table([make_record(apy), make_record()])

        assert table.row_count == 2
        output = self.render(table)
        assert "5.23%" in output
        assert "netApy=0.0523" in output
