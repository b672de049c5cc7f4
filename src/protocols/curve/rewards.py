"""Reward-token yield of a gauge's staking-rewards contract.

Two accounting models exist on chain:

- StakingRewards: one reward token, ``periodFinish()`` and ``rewardRate()``
- MultiRewards: ``rewardTokens(i)`` registry with ``rewardData(token)`` per token

:func:`detect_reward_model` probes the contract once and the accountant
dispatches on the result.
"""

import asyncio
import logging
import time
from decimal import Decimal
from typing import Any, List, Optional

from src.core.constants import SECONDS_PER_YEAR
from src.core.exceptions import ContractReadError
from src.core.models import MultiStream, NoStream, RewardModel, RewardTokenData, SingleStream
from src.core.numeric import ZERO, decimal_sum, from_wad, in_yield_context, safe_div, to_decimal
from src.data.contracts import ContractReader, first_present
from src.data.sources.price_oracle import PriceOracle

from .abis import REWARDS_ABI

logger = logging.getLogger(__name__)

# Reward token getter, highest priority first. Each name is a historical
# variant of the same accessor:
#   rewardToken   Curve-deployed StakingRewards
#   rewardsToken  Synthetix StakingRewards forks
#   snx           original SNX staking contract
REWARD_TOKEN_ACCESSORS = ("rewardToken", "rewardsToken", "snx")


@in_yield_context
def token_reward_apr(
    reward_rate: Any,
    reward_price: Any,
    pool_virtual_price: Any,
    total_supply: Any,
    base_price: Any,
) -> Decimal:
    """
    Annualized yield of one reward stream relative to the staked TVL.

    ``reward_rate``, ``pool_virtual_price`` and ``total_supply`` are raw
    18-decimal integers. A zero TVL yields zero.
    """
    emitted_usd = SECONDS_PER_YEAR * from_wad(reward_rate) * to_decimal(reward_price)
    tvl_usd = from_wad(pool_virtual_price) * from_wad(total_supply) * to_decimal(base_price)
    return safe_div(emitted_usd, tvl_usd)


async def detect_reward_model(reader: ContractReader, address: str) -> RewardModel:
    """Classify the reward contract at ``address``."""
    try:
        period_finish = await reader.call(address, REWARDS_ABI, "periodFinish")
    except ContractReadError:
        pass
    else:
        return SingleStream(address=address, period_finish=int(period_finish))

    try:
        await reader.call(address, REWARDS_ABI, "rewardTokens", 0)
    except ContractReadError as e:
        logger.debug(f"No readable reward stream at {address}: {e}")
        return NoStream(address=address)
    return MultiStream(address=address)


async def _read_reward_data(reader: ContractReader, address: str, token: str) -> Optional[RewardTokenData]:
    data = await reader.call_or_default(address, REWARDS_ABI, "rewardData", token, default=None)
    if data is None:
        return None
    # (distributor, duration, periodFinish, rewardRate, lastUpdateTime, rewardPerTokenStored)
    return RewardTokenData(token=token, reward_rate=int(data[3]), period_finish=int(data[2]))


async def _registry_rewards_apr(
    reader: ContractReader,
    oracle: PriceOracle,
    address: str,
    total_supply: Any,
    pool_virtual_price: Any,
    base_price: Any,
    now: int,
) -> Decimal:
    """Sum the yield of every active token in a ``rewardTokens`` registry."""
    tokens: List[str] = await reader.collect_slots(address, REWARDS_ABI, "rewardTokens")
    if not tokens:
        return ZERO

    async def contribution(token: str) -> Decimal:
        data, price = await asyncio.gather(
            _read_reward_data(reader, address, token),
            oracle.usd(token, 0.0),
        )
        if data is None or not data.is_active(now):
            return ZERO
        return token_reward_apr(data.reward_rate, price or 0, pool_virtual_price, total_supply, base_price)

    contributions = await asyncio.gather(*(contribution(t) for t in tokens))
    return decimal_sum(contributions)


async def _single_stream_apr(
    reader: ContractReader,
    oracle: PriceOracle,
    stream: SingleStream,
    pool_virtual_price: Any,
    base_price: Any,
    now: int,
) -> Decimal:
    if stream.period_finish < now:
        return ZERO

    address = stream.address
    *token_candidates, rate, supply = await asyncio.gather(
        *(reader.call_or_default(address, REWARDS_ABI, name) for name in REWARD_TOKEN_ACCESSORS),
        reader.call_or_default(address, REWARDS_ABI, "rewardRate", default=0),
        reader.call_or_default(address, REWARDS_ABI, "totalSupply", default=0),
    )

    reward_token = first_present(token_candidates)
    price = await oracle.usd(reward_token, 0.0) if reward_token else 0.0

    if price and rate:
        return token_reward_apr(rate, price, pool_virtual_price, supply, base_price)

    # StakingRewards variants that also expose a token registry
    return await _registry_rewards_apr(reader, oracle, address, supply, pool_virtual_price, base_price, now)


async def calculate_rewards_apr(
    reader: ContractReader,
    oracle: PriceOracle,
    rewards_address: str,
    pool_virtual_price: Any,
    base_price: Any,
    now: Optional[int] = None,
) -> Decimal:
    """
    Annualized reward-token yield of a staking-rewards contract.

    Args:
        reader: Contract reader
        oracle: Price oracle for reward tokens
        rewards_address: Reward contract attached to the gauge
        pool_virtual_price: Pool virtual price (raw, 18 decimals)
        base_price: USD price of the pool's base asset
        now: Unix time used for expiry checks (defaults to the current time)

    Returns:
        Reward APR, zero when no stream is active
    """
    if now is None:
        now = int(time.time())

    model = await detect_reward_model(reader, rewards_address)

    if isinstance(model, SingleStream):
        return await _single_stream_apr(reader, oracle, model, pool_virtual_price, base_price, now)

    if isinstance(model, MultiStream):
        supply = await reader.call_or_default(rewards_address, REWARDS_ABI, "totalSupply", default=0)
        return await _registry_rewards_apr(
            reader, oracle, rewards_address, supply, pool_virtual_price, base_price, now
        )

    return ZERO
