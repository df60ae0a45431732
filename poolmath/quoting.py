"""Quote swaps and liquidity changes against validated pool snapshots.

Dispatches a pydantic pool snapshot to the matching invariant engine. The
engines stay plain functions over integers; this module is the seam where a
pool contract's data meets them.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from poolmath.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from poolmath.models import (
    DepositQuote,
    StablePoolState,
    SwapKind,
    SwapQuote,
    SwapRequest,
    WeightedPoolState,
)
from poolmath.pools import stable_math, weighted_math
from poolmath.pools.errors import InvalidInputs

logger = structlog.get_logger()

PoolState = WeightedPoolState | StablePoolState


def _check_request(pool: PoolState, request: SwapRequest) -> None:
    n_assets = len(pool.balances)
    if request.index_in >= n_assets or request.index_out >= n_assets:
        raise InvalidInputs(
            f"Swap indices ({request.index_in}, {request.index_out}) out of range "
            f"for {n_assets} assets"
        )


def quote_swap(
    pool: PoolState,
    request: SwapRequest,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> SwapQuote:
    """Compute the counterpart amount of a swap.

    Raises:
        InvalidInputs: If the request indices do not fit the pool
        PoolMathError: Any engine failure, unchanged
    """
    _check_request(pool, request)
    i, j = request.index_in, request.index_out

    if isinstance(pool, WeightedPoolState):
        weights = pool.weight_set()
        if request.kind is SwapKind.SELL:
            amount_in = request.amount
            amount_out = weighted_math.out_given_in(
                i, j, amount_in, pool.balances, weights, config=config
            )
        else:
            amount_out = request.amount
            amount_in = weighted_math.in_given_out(
                i, j, amount_out, pool.balances, weights, config=config
            )
        pool_type = "weighted"
    else:
        amp = pool.amplification
        if request.kind is SwapKind.SELL:
            amount_in = request.amount
            amount_out = stable_math.calc_out_given_in(
                amp, i, j, amount_in, pool.balances, config=config
            )
        else:
            amount_out = request.amount
            amount_in = stable_math.calc_in_given_out(
                amp, i, j, amount_out, pool.balances, config=config
            )
        pool_type = "stable"

    logger.debug(
        "swap_quoted",
        pool_type=pool_type,
        kind=request.kind.value,
        amount_in=amount_in,
        amount_out=amount_out,
    )
    return SwapQuote(kind=request.kind, amount_in=amount_in, amount_out=amount_out)


def quote_deposit(
    pool: PoolState,
    deposits: Sequence[int],
    lp_supply: int,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> DepositQuote:
    """Compute LP tokens issued for a deposit.

    Weighted pools absorb deposits at the smallest deposit/balance ratio and
    refund the rest; the first deposit (lp_supply == 0) issues the invariant of
    the deposits. Stable pools absorb any mix and never refund.
    """
    if len(deposits) != len(pool.balances):
        raise InvalidInputs(f"Got {len(deposits)} deposits for {len(pool.balances)} assets")

    if isinstance(pool, WeightedPoolState):
        if lp_supply == 0:
            issued = weighted_math.initial_pool_tokens(deposits, pool.weight_set())
            refunds = [0] * len(deposits)
        else:
            issued, refunds = weighted_math.compute_pool_tokens_issued(
                deposits, pool.balances, lp_supply
            )
    else:
        issued = stable_math.compute_pool_tokens_issued(
            pool.amplification, deposits, pool.balances, lp_supply, config=config
        )
        refunds = [0] * len(deposits)

    logger.debug("deposit_quoted", issued=issued, refunds=refunds, lp_supply=lp_supply)
    return DepositQuote(issued=issued, refunds=refunds)


def quote_redemption(pool: PoolState, redeemed: int, lp_supply: int) -> list[int]:
    """Amount of every asset returned for redeemed LP tokens, rounded down."""
    amounts = [
        weighted_math.compute_asset_amount_to_return(balance, redeemed, lp_supply)
        for balance in pool.balances
    ]
    logger.debug("redemption_quoted", redeemed=redeemed, amounts=amounts)
    return amounts
