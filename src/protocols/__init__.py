"""Protocol-specific implementations.

- Curve (src.protocols.curve): gauge emissions, reward streams, pool fees
- Yearn (src.protocols.yearn): v2 vault resolution, price-per-share yield
- Overrides (src.protocols.overrides): per-vault data corrections
"""

# Note: submodules are not imported here to avoid circular imports
# Import specific modules as needed:
#   from src.protocols.curve import CurveApyCalculator
#   from src.protocols.yearn import VaultResolver
#   from src.protocols.overrides import OverrideTable
