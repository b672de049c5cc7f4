"""Curve protocol configuration and constants (Ethereum Mainnet)."""

from decimal import Decimal

# Contract addresses
CURVE_REGISTRY_ADDRESS = "0x90E00ACe148ca3b23Ac1bC8C240C2a7Dd9c2d7f5"
YEARN_VECRV_VOTER_ADDRESS = "0xF147b8125d2ef93FB6965Db97D6746952a133934"

# Tokens
CRV_ADDRESS = "0xD533a949740bb3306d119CC777fa900bA034cd52"
WBTC_ADDRESS = "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599"
RENBTC_ADDRESS = "0xEB4C2781e4ebA804CE9a9803C67d0893436bB27D"
SBTC_ADDRESS = "0xfE18be6b3Bd88A2D2A7f928d00292E7a9963CfC6"
SETH_ADDRESS = "0x5e74C9036fb86BD7eCdcb084a0673EFc32eA31cb"
ETH_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
STETH_ADDRESS = "0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84"
WETH_ADDRESS = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"

# Underlying coins priced as WBTC / WETH (lowercase for comparison)
BTC_LIKE_ADDRESSES = frozenset(a.lower() for a in (RENBTC_ADDRESS, WBTC_ADDRESS, SBTC_ADDRESS))
ETH_LIKE_ADDRESSES = frozenset(
    a.lower() for a in (SETH_ADDRESS, ETH_ADDRESS, WETH_ADDRESS, STETH_ADDRESS)
)

# Gauge boost
MAX_BOOST = Decimal("2.5")
INVERSE_MAX_BOOST = Decimal(1) / MAX_BOOST  # 0.4

APY_TYPE = "curve"
APY_DESCRIPTION = "Pool APY + Boosted CRV APY"
