"""Timestamp to block height estimation."""

import logging
import math
from typing import Dict, Optional

from config.settings import Settings, get_settings
from src.core.models import BlockHeader
from src.data.contracts import ContractReader

logger = logging.getLogger(__name__)


class BlockTimeEstimator:
    """
    Finds the block that was current at a given timestamp.

    The search starts from an estimate based on the average block time,
    brackets the target by widening steps against real block timestamps and
    bisects the bracket. The result is the greatest block whose timestamp is
    at or before the target.
    """

    def __init__(self, reader: ContractReader, settings: Optional[Settings] = None):
        self.reader = reader
        self.settings = settings or get_settings()

    async def fetch_latest_block(self) -> BlockHeader:
        return await self.reader.get_block("latest")

    async def estimate_block_precise(
        self,
        target_timestamp: int,
        latest: Optional[BlockHeader] = None,
    ) -> int:
        """
        Get the block height at ``target_timestamp``.

        Args:
            target_timestamp: Unix timestamp in seconds
            latest: Latest block header, fetched if not given

        Returns:
            Block number, clamped to ``[settings.earliest_block, latest.number]``

        Raises:
            ContractReadError: If a block header cannot be fetched
        """
        if latest is None:
            latest = await self.fetch_latest_block()
        if target_timestamp >= latest.timestamp:
            return latest.number

        floor = min(self.settings.earliest_block, latest.number)
        block_time = self.settings.average_block_time
        headers: Dict[int, BlockHeader] = {latest.number: latest}

        async def header(number: int) -> BlockHeader:
            if number not in headers:
                headers[number] = await self.reader.get_block(number)
            return headers[number]

        def blocks_between(a: int, b: int) -> int:
            return max(1, math.ceil(abs(a - b) / block_time))

        guess = latest.number - blocks_between(latest.timestamp, target_timestamp)
        guess = max(floor, guess)
        guessed = await header(guess)

        # Bracket so that ts(low) <= target < ts(high)
        if guessed.timestamp <= target_timestamp:
            low, high = guess, latest.number
            step = blocks_between(guessed.timestamp, target_timestamp)
            while low + step < latest.number:
                probe = await header(low + step)
                if probe.timestamp > target_timestamp:
                    high = low + step
                    break
                low += step
                step *= 2
        else:
            high = guess
            step = blocks_between(guessed.timestamp, target_timestamp)
            while True:
                candidate = high - step
                if candidate <= floor:
                    earliest = await header(floor)
                    if earliest.timestamp > target_timestamp:
                        logger.debug(f"Timestamp {target_timestamp} precedes block {floor}, clamping")
                        return floor
                    low = floor
                    break
                probe = await header(candidate)
                if probe.timestamp <= target_timestamp:
                    low = candidate
                    break
                high = candidate
                step *= 2

        while high - low > 1:
            mid = (low + high) // 2
            if (await header(mid)).timestamp <= target_timestamp:
                low = mid
            else:
                high = mid

        logger.debug(f"Estimated block {low} for timestamp {target_timestamp} ({len(headers)} headers)")
        return low
