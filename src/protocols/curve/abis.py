"""Minimal Curve ABIs: only the view functions the yield engine reads."""

from src.data.contracts import view_function

REGISTRY_ABI = [
    view_function("get_pool_from_lp_token", ["address"], ["address"]),
    view_function("get_gauges", ["address"], ["address[10]", "int128[10]"]),
    view_function("get_underlying_coins", ["address"], ["address[8]"]),
    view_function("get_virtual_price_from_lp_token", ["address"]),
]

GAUGE_ABI = [
    view_function("controller", outputs=["address"]),
    view_function("working_supply"),
    view_function("inflation_rate"),
    view_function("working_balances", ["address"]),
    view_function("balanceOf", ["address"]),
    view_function("reward_contract", outputs=["address"]),
]

GAUGE_CONTROLLER_ABI = [
    view_function("gauge_relative_weight", ["address"]),
]

# StakingRewards and MultiRewards share totalSupply / rewardTokens / rewardData
# so a single ABI serves both models.
REWARDS_ABI = [
    view_function("periodFinish"),
    view_function("rewardRate"),
    view_function("totalSupply"),
    view_function("rewardToken", outputs=["address"]),
    view_function("rewardsToken", outputs=["address"]),
    view_function("snx", outputs=["address"]),
    view_function("rewardTokens", ["uint256"], ["address"]),
    view_function(
        "rewardData",
        ["address"],
        # rewardsDistributor, rewardsDuration, periodFinish, rewardRate,
        # lastUpdateTime, rewardPerTokenStored
        ["address", "uint256", "uint256", "uint256", "uint256", "uint256"],
    ),
]
