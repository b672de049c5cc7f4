"""Minimal Yearn vault and strategy ABIs."""

from src.data.contracts import view_function

ERC20_ABI = [
    view_function("name", outputs=["string"]),
    view_function("symbol", outputs=["string"]),
    view_function("decimals", outputs=["uint8"]),
]

VAULT_V2_ABI = ERC20_ABI + [
    view_function("token", outputs=["address"]),
    view_function("performanceFee"),
    view_function("managementFee"),
    view_function("withdrawalQueue", ["uint256"], ["address"]),
    view_function("pricePerShare"),
]

STRATEGY_ABI = [
    view_function("name", outputs=["string"]),
    view_function("keepCRV"),
]
