"""Weighted pool math.

Core math for weighted product pools, whose invariant is

    K = prod(balance_i ^ weight_i)

Every swap amount is rounded in the pool's favor (outputs under-estimated,
inputs over-estimated) and re-checked against the invariant before it is
returned.

Each operation has two entry points: one taking Q64.64 fraction weights and
an `_integer` variant taking percentages that sum to 100. Both delegate to the
WeightSet-based implementation below.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from poolmath.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from poolmath.constants import MAX_U64
from poolmath.math.fixed_point import (
    FRACTIONAL_BITS,
    FixedPoint64,
    FixedPointOverflow,
    Rounding,
    pow_product_raw,
)
from poolmath.math.numeric import mul_div

from .errors import InvalidInputs, InvariantDecrease, Overflow, ValuesTooLarge, ZeroWeightRatio
from .weights import FixedPointWeights, PercentWeights, WeightSet

logger = structlog.get_logger()


# =============================================================================
# Validation helpers
# =============================================================================


def _validate_pool(balances: Sequence[int], weights: WeightSet) -> None:
    if len(balances) != len(weights):
        raise InvalidInputs(f"Got {len(balances)} balances but {len(weights)} weights")
    if len(balances) < 2:
        raise InvalidInputs(f"Weighted pools need at least 2 assets, got {len(balances)}")
    for i, balance in enumerate(balances):
        if balance <= 0:
            raise InvalidInputs(f"Balance at index {i} must be positive")
        if balance > MAX_U64:
            raise InvalidInputs(f"Balance at index {i} exceeds u64: {balance}")
    weights.validate()


def _validate_indices(index_in: int, index_out: int, n_assets: int) -> None:
    if not 0 <= index_in < n_assets:
        raise InvalidInputs(f"index_in {index_in} out of range for {n_assets} assets")
    if not 0 <= index_out < n_assets:
        raise InvalidInputs(f"index_out {index_out} out of range for {n_assets} assets")
    if index_in == index_out:
        raise InvalidInputs("Cannot swap an asset with itself")


def _replace(balances: Sequence[int], updates: dict[int, int]) -> list[int]:
    new_balances = list(balances)
    for index, value in updates.items():
        new_balances[index] = value
    return new_balances


# =============================================================================
# Invariant
# =============================================================================


def _invariant(balances: Sequence[int], weights: WeightSet) -> FixedPoint64:
    # K = prod(b_i ^ w_i), accumulated from 1.0 at working precision. Factors
    # are multiplied in sorted order so K does not depend on asset order.
    factors = sorted(
        (balance << FRACTIONAL_BITS, weight.value)
        for balance, weight in zip(balances, weights.exponents())
    )
    bases = [base for base, _ in factors]
    exponents = [exponent for _, exponent in factors]
    return FixedPoint64(pow_product_raw(bases, exponents))


def _check_invariant(
    prev_invariant: FixedPoint64,
    balances_after: Sequence[int],
    weights: WeightSet,
    config: EngineConfig,
    operation: str,
) -> None:
    """Raise InvariantDecrease unless new_invariant + tolerance >= prev_invariant."""
    new_invariant = _invariant(balances_after, weights)
    tolerance = FixedPoint64(config.weighted_invariant_tolerance_raw)
    if new_invariant.add(tolerance) < prev_invariant:
        logger.warning(
            "weighted_invariant_decrease",
            operation=operation,
            prev_invariant=prev_invariant.value,
            new_invariant=new_invariant.value,
        )
        raise InvariantDecrease(
            f"{operation}: invariant fell from {prev_invariant} to {new_invariant}"
        )


def invariant(balances: Sequence[int], weights: WeightSet) -> FixedPoint64:
    """Compute the weighted invariant for any WeightSet.

    Raises:
        InvalidInputs: If lengths mismatch, fewer than 2 assets, a balance is
            not positive, or the weights do not sum to one
    """
    _validate_pool(balances, weights)
    return _invariant(balances, weights)


def compute_invariant(balances: Sequence[int], weights: Sequence[FixedPoint64]) -> FixedPoint64:
    """Compute K = prod(balance_i ^ weight_i) with Q64.64 fraction weights."""
    return invariant(balances, FixedPointWeights.of(weights))


def compute_invariant_integer(balances: Sequence[int], weights: Sequence[int]) -> FixedPoint64:
    """Compute K = prod(balance_i ^ (weight_i / 100)) with percentage weights."""
    return invariant(balances, PercentWeights.of(weights))


# =============================================================================
# Swaps
# =============================================================================


def out_given_in(
    index_in: int,
    index_out: int,
    amount_in: int,
    balances: Sequence[int],
    weights: WeightSet,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Calculate the output amount for a given input (sell).

    Formula:
        amount_out = balance_out * (1 - (b_in / (b_in + amount_in))^(w_in / w_out))

    The base is rounded up and the power uses round-up exponentiation, so the
    subtracted term is never below its true value; the result is decoded
    rounding down.

    Raises:
        InvalidInputs: If the pool or indices are malformed
        Overflow: If balance_in + amount_in exceeds u64
        ZeroWeightRatio: If weight_in / weight_out rounds to zero
        InvariantDecrease: If the post-swap invariant check fails
    """
    _validate_pool(balances, weights)
    _validate_indices(index_in, index_out, len(balances))
    if amount_in < 0:
        raise InvalidInputs(f"amount_in must be non-negative, got {amount_in}")

    balance_in = balances[index_in]
    balance_out = balances[index_out]
    new_balance_in = balance_in + amount_in
    if new_balance_in > MAX_U64:
        raise Overflow(f"balance_in {balance_in} + amount_in {amount_in} exceeds u64")

    # exponent = weight_in / weight_out (rounded down)
    exponent = weights.ratio(index_in, index_out, Rounding.DOWN)
    if exponent.is_zero():
        raise ZeroWeightRatio(f"weight ratio {index_in}/{index_out} is zero")

    # base = balance_in / (balance_in + amount_in) (rounded up)
    base = FixedPoint64.from_rational(balance_in, new_balance_in, Rounding.UP)
    power = exponent.pow_up(base)

    amount_out = power.complement().mul_int(balance_out).to_int(Rounding.DOWN)

    prev_invariant = _invariant(balances, weights)
    balances_after = _replace(
        balances, {index_in: new_balance_in, index_out: balance_out - amount_out}
    )
    _check_invariant(prev_invariant, balances_after, weights, config, "out_given_in")

    logger.debug(
        "weighted_out_given_in",
        index_in=index_in,
        index_out=index_out,
        amount_in=amount_in,
        amount_out=amount_out,
    )
    return amount_out


def in_given_out(
    index_in: int,
    index_out: int,
    amount_out: int,
    balances: Sequence[int],
    weights: WeightSet,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Calculate the input amount for a given output (buy).

    Formula:
        amount_in = balance_in * ((b_out / (b_out - amount_out))^(w_out / w_in) - 1)

    The exponent and power are rounded up and the result is decoded rounding
    up, so the input is an over-estimate.

    Raises:
        InvalidInputs: If the pool or indices are malformed
        ValuesTooLarge: If amount_out >= balance_out or amount_in exceeds u64
        Overflow: If balance_in + amount_in exceeds u64
        ZeroWeightRatio: If weight_out / weight_in is zero
        InvariantDecrease: If the post-swap invariant check fails
    """
    _validate_pool(balances, weights)
    _validate_indices(index_in, index_out, len(balances))
    if amount_out < 0:
        raise InvalidInputs(f"amount_out must be non-negative, got {amount_out}")

    balance_in = balances[index_in]
    balance_out = balances[index_out]
    if amount_out >= balance_out:
        raise ValuesTooLarge(f"amount_out {amount_out} must be less than balance_out {balance_out}")

    # exponent = weight_out / weight_in (rounded up)
    exponent = weights.ratio(index_out, index_in, Rounding.UP)
    if exponent.is_zero():
        raise ZeroWeightRatio(f"weight ratio {index_out}/{index_in} is zero")

    new_balance_out = balance_out - amount_out
    base = FixedPoint64.from_rational(balance_out, new_balance_out, Rounding.UP)
    try:
        power = exponent.pow_up(base)
    except FixedPointOverflow as exc:
        raise ValuesTooLarge(f"amount_out {amount_out} drains balance_out {balance_out}") from exc

    ratio = power.checked_sub(FixedPoint64(FixedPoint64.ONE))
    amount_in = ratio.mul_int(balance_in).to_int(Rounding.UP)
    if amount_in > MAX_U64:
        raise ValuesTooLarge(f"amount_in {amount_in} exceeds u64")
    new_balance_in = balance_in + amount_in
    if new_balance_in > MAX_U64:
        raise Overflow(f"balance_in {balance_in} + amount_in {amount_in} exceeds u64")

    prev_invariant = _invariant(balances, weights)
    balances_after = _replace(balances, {index_in: new_balance_in, index_out: new_balance_out})
    _check_invariant(prev_invariant, balances_after, weights, config, "in_given_out")

    logger.debug(
        "weighted_in_given_out",
        index_in=index_in,
        index_out=index_out,
        amount_in=amount_in,
        amount_out=amount_out,
    )
    return amount_in


def calc_out_given_in(
    index_in: int,
    index_out: int,
    amount_in: int,
    balances: Sequence[int],
    weights: Sequence[FixedPoint64],
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Sell amount_in of asset index_in for asset index_out (Q64.64 weights)."""
    return out_given_in(
        index_in, index_out, amount_in, balances, FixedPointWeights.of(weights), config=config
    )


def calc_out_given_in_integer(
    index_in: int,
    index_out: int,
    amount_in: int,
    balances: Sequence[int],
    weights: Sequence[int],
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Sell amount_in of asset index_in for asset index_out (percentage weights)."""
    return out_given_in(
        index_in, index_out, amount_in, balances, PercentWeights.of(weights), config=config
    )


def calc_in_given_out(
    index_in: int,
    index_out: int,
    amount_out: int,
    balances: Sequence[int],
    weights: Sequence[FixedPoint64],
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Buy amount_out of asset index_out with asset index_in (Q64.64 weights)."""
    return in_given_out(
        index_in, index_out, amount_out, balances, FixedPointWeights.of(weights), config=config
    )


def calc_in_given_out_integer(
    index_in: int,
    index_out: int,
    amount_out: int,
    balances: Sequence[int],
    weights: Sequence[int],
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Buy amount_out of asset index_out with asset index_in (percentage weights)."""
    return in_given_out(
        index_in, index_out, amount_out, balances, PercentWeights.of(weights), config=config
    )


def spot_price(
    index_in: int, index_out: int, balances: Sequence[int], weights: WeightSet
) -> FixedPoint64:
    """Marginal price of asset index_out in units of asset index_in, fee-less.

    price = (balance_in / weight_in) / (balance_out / weight_out), rounded down.
    """
    _validate_pool(balances, weights)
    _validate_indices(index_in, index_out, len(balances))
    ratio = weights.ratio(index_out, index_in, Rounding.DOWN)
    balance_ratio = FixedPoint64.from_rational(balances[index_in], balances[index_out])
    return balance_ratio.mul_down(ratio.as_fixed_point())


def calc_spot_price(
    index_in: int, index_out: int, balances: Sequence[int], weights: Sequence[FixedPoint64]
) -> FixedPoint64:
    return spot_price(index_in, index_out, balances, FixedPointWeights.of(weights))


def calc_spot_price_integer(
    index_in: int, index_out: int, balances: Sequence[int], weights: Sequence[int]
) -> FixedPoint64:
    return spot_price(index_in, index_out, balances, PercentWeights.of(weights))


# =============================================================================
# Liquidity
# =============================================================================


def compute_pool_tokens_issued(
    deposits: Sequence[int],
    balances: Sequence[int],
    lp_supply: int,
) -> tuple[int, list[int]]:
    """Compute LP tokens issued for a deposit and the per-asset refunds.

    The deposit is absorbed at the smallest deposit/balance ratio r_min:
        issued = floor(lp_supply * r_min)
        refund_i = deposit_i - ceil(r_min * balance_i)   (0 for the r_min asset)

    Issued LP rounds down while the absorbed deposit rounds up, so the pool
    never issues more value than it receives.

    Args:
        deposits: Offered amount per asset
        balances: Current pool balances
        lp_supply: Current LP token supply (must be positive)

    Returns:
        Tuple of (issued, refunds)

    Raises:
        InvalidInputs: If shapes mismatch, lp_supply is zero or a balance is zero
        ValuesTooLarge: If issued would exceed u64
    """
    if len(deposits) != len(balances):
        raise InvalidInputs(f"Got {len(deposits)} deposits but {len(balances)} balances")
    if len(balances) < 2:
        raise InvalidInputs(f"Weighted pools need at least 2 assets, got {len(balances)}")
    if lp_supply <= 0:
        raise InvalidInputs("lp_supply must be positive")
    for i, (deposit, balance) in enumerate(zip(deposits, balances)):
        if balance <= 0:
            raise InvalidInputs(f"Balance at index {i} must be positive")
        if deposit < 0:
            raise InvalidInputs(f"Deposit at index {i} must be non-negative")

    ratios = [
        FixedPoint64.from_rational(deposit, balance)
        for deposit, balance in zip(deposits, balances)
    ]
    # First occurrence wins ties
    min_index = min(range(len(ratios)), key=lambda i: ratios[i].value)
    min_ratio = ratios[min_index]

    issued = min_ratio.mul_int(lp_supply).to_int(Rounding.DOWN)
    if issued > MAX_U64:
        raise ValuesTooLarge(f"issued {issued} exceeds u64 (lp_supply {lp_supply})")

    refunds = []
    for i, (deposit, balance) in enumerate(zip(deposits, balances)):
        if i == min_index:
            refunds.append(0)
            continue
        expected = min_ratio.mul_int(balance).to_int(Rounding.UP)
        refunds.append(deposit - expected)

    logger.debug("weighted_pool_tokens_issued", issued=issued, refunds=refunds, min_index=min_index)
    return issued, refunds


def initial_pool_tokens(deposits: Sequence[int], weights: WeightSet) -> int:
    """LP tokens for the first deposit into an empty pool: floor(K(deposits)).

    Raises:
        InvalidInputs: If the deposits do not form a valid pool or K < 1
    """
    _validate_pool(deposits, weights)
    issued = _invariant(deposits, weights).to_int(Rounding.DOWN)
    if issued == 0:
        raise InvalidInputs("initial deposit too small to issue any pool tokens")
    return issued


def compute_initial_pool_tokens(deposits: Sequence[int], weights: Sequence[FixedPoint64]) -> int:
    return initial_pool_tokens(deposits, FixedPointWeights.of(weights))


def compute_initial_pool_tokens_integer(deposits: Sequence[int], weights: Sequence[int]) -> int:
    return initial_pool_tokens(deposits, PercentWeights.of(weights))


def compute_asset_amount_to_return(balance: int, redeemed: int, supply: int) -> int:
    """Proportional redemption: floor(redeemed * balance / supply).

    Raises:
        InvalidInputs: If supply is zero
        ValuesTooLarge: If redeemed exceeds supply
    """
    if supply <= 0:
        raise InvalidInputs("supply must be positive")
    if redeemed > supply:
        raise ValuesTooLarge(f"redeemed {redeemed} exceeds supply {supply}")
    return mul_div(redeemed, balance, supply)
