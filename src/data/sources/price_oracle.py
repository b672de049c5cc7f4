"""USD price sources.

- :class:`PriceOracle`: CoinGecko token prices, aliased, rate limited and cached
- :class:`RouterQuote`: on-chain router quote between two tokens
"""

import asyncio
import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

import aiohttp
from aiolimiter import AsyncLimiter

from config.settings import Settings, get_settings
from src.core.exceptions import PriceUnavailableError
from src.core.numeric import to_decimal
from src.data.cache.quote_cache import QuoteCache
from src.data.contracts import ContractReader, view_function

logger = logging.getLogger(__name__)

PriceQuote = Dict[str, float]

QUOTE_ADDRESS = "0x89ECCe31817c2B98479Ba36694810c4497ADA361"
USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDC_DECIMALS = 6

QUOTE_ABI = [view_function("getPriceFromRouter", ["address", "address"])]


class AliasTable:
    """Maps wrapped or synthetic assets to the asset whose price they track."""

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        self._aliases = {k.lower(): v for k, v in (aliases or {}).items()}

    @classmethod
    def load(cls, path: Path) -> "AliasTable":
        if not path.exists():
            logger.warning(f"Alias table not found at {path}, prices are not aliased")
            return cls()
        with path.open() as f:
            return cls(json.load(f))

    def resolve(self, address: str) -> str:
        return self._aliases.get(address.lower(), address)

    def __len__(self) -> int:
        return len(self._aliases)


class PriceOracle:
    """
    Token prices from the CoinGecko ``simple/token_price`` endpoint.

    A missing or failed quote is reported as ``None``; the oracle never
    invents a price.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        aliases: Optional[AliasTable] = None,
        cache: Optional[QuoteCache] = None,
    ):
        self.settings = settings or get_settings()
        self.aliases = aliases if aliases is not None else AliasTable.load(self.settings.aliases_path)
        self.cache = cache or QuoteCache(self.settings)
        self._session: Optional[aiohttp.ClientSession] = None
        self._rate_limiter = AsyncLimiter(
            self.settings.price_rate_limit,
            self.settings.price_rate_window,
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            headers = {"accept": "application/json"}
            if self.settings.coingecko_api_key:
                headers["x-cg-demo-api-key"] = self.settings.coingecko_api_key
            self._session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=10),
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self.cache.close()

    async def _fetch_price(self, address: str, currencies: Sequence[str]) -> PriceQuote:
        """
        Fetch a quote from CoinGecko.

        Raises:
            PriceUnavailableError: Non-200 response or no entry for the token
        """
        session = await self._get_session()
        url = f"{self.settings.coingecko_api_url}/simple/token_price/ethereum"
        params = {"contract_addresses": address.lower(), "vs_currencies": ",".join(currencies)}

        async with self._rate_limiter:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    raise PriceUnavailableError(f"HTTP {response.status} for {address}")
                payload = await response.json()

        entry = payload.get(address.lower()) if isinstance(payload, dict) else None
        if not entry or any(entry.get(c) is None for c in currencies):
            raise PriceUnavailableError(f"No {','.join(currencies)} quote for {address}")
        return {c: float(entry[c]) for c in currencies}

    async def price(
        self,
        address: str,
        currencies: Sequence[str] = ("usd",),
    ) -> Optional[PriceQuote]:
        """
        Get the price of a token.

        Args:
            address: Token address (aliases applied first)
            currencies: Quote currencies

        Returns:
            ``{currency: price}`` or None if unavailable
        """
        resolved = self.aliases.resolve(address)

        cached = self.cache.get_quote(resolved, currencies)
        if cached is not None:
            return cached

        try:
            quote = await self._fetch_price(resolved, currencies)
        except (PriceUnavailableError, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Price unavailable for {address}: {e}")
            return None

        self.cache.put_quote(resolved, currencies, quote)
        return quote

    async def usd(self, address: str, fallback: Optional[float] = None) -> Optional[float]:
        """USD price of ``address``, or ``fallback`` if the oracle has none."""
        quote = await self.price(address, ("usd",))
        if quote is None:
            return fallback
        return quote["usd"]


class RouterQuote:
    """Token-to-token price from the on-chain Quote router."""

    def __init__(self, reader: ContractReader, aliases: Optional[AliasTable] = None):
        self.reader = reader
        self.aliases = aliases or AliasTable()

    async def price(self, start: str, end: str) -> Decimal:
        """Price of ``start`` in units of ``end``.

        USDC quoted against itself is exactly ``10**6`` and never hits the
        router.

        Raises:
            ContractReadError: If the router call fails
        """
        start = self.aliases.resolve(start)
        end = self.aliases.resolve(end)
        if start.lower() == end.lower() == USDC_ADDRESS.lower():
            return Decimal(10**USDC_DECIMALS)
        value = await self.reader.call(QUOTE_ADDRESS, QUOTE_ABI, "getPriceFromRouter", start, end)
        return to_decimal(value)
