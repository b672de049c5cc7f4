"""Data layer: contract reads, prices, block lookup and persistence."""

from .cache.quote_cache import QuoteCache
from .contracts import ContractReader, first_present, is_null_address
from .sources.blocks import BlockTimeEstimator
from .sources.price_oracle import AliasTable, PriceOracle, RouterQuote
from .store import KeyValueStore

__all__ = [
    "AliasTable",
    "BlockTimeEstimator",
    "ContractReader",
    "KeyValueStore",
    "PriceOracle",
    "QuoteCache",
    "RouterQuote",
    "first_present",
    "is_null_address",
]
