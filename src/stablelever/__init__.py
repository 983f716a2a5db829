"""
Top-level API for stablelever (integer-domain).

Pricing and solvency engine for a two-token leveraged stablecoin protocol:
  - LstExchangeContext / ExoExchangeContext: cached pricing state with NAV,
    fee and limit queries for each collateral-pricing variant
  - oracle validation (Pyth, Switchboard) yielding conservative price ranges
  - stability regimes, fee tables and interpolated fee curves
  - rebalancing price curves and stability pool LP math

Every monetary value is a checked fixed-point integer (`UFix64`, `IFix64`)
with an explicit decimal exponent; results are bit-reproducible.
"""

# NOTE:
#   Decimal helpers in `stablelever.core.fmt` are for display and I/O only.
#   Nothing in the engine configures logging handlers.

from __future__ import annotations

from .core import (
    N2,
    N4,
    N5,
    N6,
    N8,
    N9,
    UFix64,
    IFix64,
    EngineError,
    ArithmeticFault,
    OracleValidationError,
    DomainError,
    StalenessError,
)
from .clock import ChainClock, FixedClock
from .config import (
    OracleConfig,
    RebalanceCurveConfig,
    SlippageConfig,
    LstSwapConfig,
    AssetSwapConfig,
    FundingRateConfig,
    YieldHarvestConfig,
)
from .oracle import (
    PriceRange,
    OraclePrice,
    VerificationLevel,
    PythPriceUpdate,
    SwitchboardQuote,
    OracleFeed,
    query_pyth_oracle,
    query_pyth_price,
    query_switchboard_price,
)
from .stability import StabilityMode, StabilityController, select_worse_mode
from .fees import (
    FeeExtract,
    FeePair,
    StablecoinFees,
    LevercoinFees,
    InterpolatedMintFees,
    InterpolatedRedeemFees,
)
from .fee_curves import mint_fee_curve, redeem_fee_curve
from .conversion import Conversion, ExoConversion, SwapConversion
from .ledger import VirtualStablecoin, TotalSolCache, LstSolPrice
from .exchange import ExchangeContext, LstExchangeContext, ExoExchangeContext
from .rebalance import (
    SellPriceCurve,
    BuyPriceCurve,
    max_sellable_collateral,
    max_buyable_collateral,
)
from .stability_pool import (
    stability_pool_cap,
    lp_token_nav,
    lp_token_out,
    amount_token_to_withdraw,
    amount_stable_to_swap,
    amount_lever_to_swap,
    stablecoin_withdrawal_fee,
)

__all__ = [
    # fixed point
    "N2",
    "N4",
    "N5",
    "N6",
    "N8",
    "N9",
    "UFix64",
    "IFix64",
    # error categories
    "EngineError",
    "ArithmeticFault",
    "OracleValidationError",
    "DomainError",
    "StalenessError",
    # clock / config
    "ChainClock",
    "FixedClock",
    "OracleConfig",
    "RebalanceCurveConfig",
    "SlippageConfig",
    "LstSwapConfig",
    "AssetSwapConfig",
    "FundingRateConfig",
    "YieldHarvestConfig",
    # oracle
    "PriceRange",
    "OraclePrice",
    "VerificationLevel",
    "PythPriceUpdate",
    "SwitchboardQuote",
    "OracleFeed",
    "query_pyth_oracle",
    "query_pyth_price",
    "query_switchboard_price",
    # regimes and fees
    "StabilityMode",
    "StabilityController",
    "select_worse_mode",
    "FeeExtract",
    "FeePair",
    "StablecoinFees",
    "LevercoinFees",
    "InterpolatedMintFees",
    "InterpolatedRedeemFees",
    "mint_fee_curve",
    "redeem_fee_curve",
    # conversion and ledger
    "Conversion",
    "ExoConversion",
    "SwapConversion",
    "VirtualStablecoin",
    "TotalSolCache",
    "LstSolPrice",
    # exchange
    "ExchangeContext",
    "LstExchangeContext",
    "ExoExchangeContext",
    # rebalancing
    "SellPriceCurve",
    "BuyPriceCurve",
    "max_sellable_collateral",
    "max_buyable_collateral",
    # stability pool
    "stability_pool_cap",
    "lp_token_nav",
    "lp_token_out",
    "amount_token_to_withdraw",
    "amount_stable_to_swap",
    "amount_lever_to_swap",
    "stablecoin_withdrawal_fee",
]
