"""
Exchange contexts: cached pricing state plus NAV, fee and limit queries.

Two variants share one interface (`ExchangeContext`):
- LstExchangeContext: LST collateral priced through an epoch-cached SOL total.
- ExoExchangeContext: exogenous collateral priced directly in USD.
"""

from .base import ExchangeContext, ExchangeState, resolve_price
from .exo import ExoExchangeContext
from .lst import LstExchangeContext

__all__ = [
    "ExchangeContext",
    "ExchangeState",
    "resolve_price",
    "LstExchangeContext",
    "ExoExchangeContext",
]
