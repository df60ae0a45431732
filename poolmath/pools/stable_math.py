"""Stable pool math.

Core math for stable (StableSwap/Curve-style) pools of 2 to 4 coins. The
invariant D solves

    A * n^n * S + D = A * D * n^n + D^(n+1) / (n^n * P)

where S is the sum and P the product of the balances. Both D and the balance
y that keeps D constant after a trade are found by bounded Newton-Raphson.

All integer arithmetic runs through SafeInt so that division by zero and
underflow fail loudly instead of producing a wrong amount.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from poolmath.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from poolmath.constants import MAX_STABLE_COINS, MAX_U64, MIN_STABLE_COINS
from poolmath.math.newton import Failed, newton_iterate
from poolmath.math.numeric import sort_ascending
from poolmath.safe_int import S, SafeInt

from .errors import (
    DNotConverge,
    InvalidInputs,
    InvalidNumCoins,
    InvariantDecrease,
    Overflow,
    ValuesTooLarge,
    YNotConverge,
    YNotDecreasing,
    YNotIncreasing,
)

logger = structlog.get_logger()


def _validate_coins(xp: Sequence[int], amp: int) -> int:
    n_coins = len(xp)
    if not MIN_STABLE_COINS <= n_coins <= MAX_STABLE_COINS:
        raise InvalidNumCoins(f"Stable pools support 2 to 4 coins, got {n_coins}")
    if amp <= 0:
        raise InvalidInputs(f"Amplification factor must be positive, got {amp}")
    for i, balance in enumerate(xp):
        if balance < 0:
            raise InvalidInputs(f"Balance at index {i} must be non-negative")
    return n_coins


def _validate_indices(i: int, j: int, n_coins: int) -> None:
    if not 0 <= i < n_coins:
        raise InvalidInputs(f"index {i} out of range for {n_coins} coins")
    if not 0 <= j < n_coins:
        raise InvalidInputs(f"index {j} out of range for {n_coins} coins")
    if i == j:
        raise InvalidInputs("Cannot swap a coin with itself")


# =============================================================================
# Invariant D
# =============================================================================


def compute_invariant(
    xp: Sequence[int],
    amp: int,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Calculate the StableSwap invariant D using Newton-Raphson iteration.

    Algorithm:
        1. Initial guess: D = sum(balances)
        2. D_p = D^(n+1) / (n^n * prod(balances)), dividing by the smallest
           balances first to keep precision
        3. D <- D * (Ann*S + n*D_p) / ((Ann - 1)*D + (n+1)*D_p), Ann = A*n
        4. Stop once |D_k - D_{k-1}| <= 3; at most 100 iterations

    Args:
        xp: Normalized balances (2 to 4 coins)
        amp: Amplification factor

    Returns:
        The invariant D (0 for an empty pool)

    Raises:
        InvalidNumCoins: If there are not 2 to 4 coins
        InvalidInputs: If amp is not positive or only some balances are zero
        DNotConverge: If the iteration does not converge
    """
    n_coins = _validate_coins(xp, amp)

    sum_balances = S(sum(xp))
    if sum_balances == 0:
        return 0
    if any(balance == 0 for balance in xp):
        raise InvalidInputs("Stable invariant is undefined with a zero balance")

    sorted_balances = [S(b) for b in sort_ascending(xp)]
    amp_times_n = S(amp) * n_coins

    def step(d_value: int) -> int | None:
        d = S(d_value)
        d_p = d
        for balance in sorted_balances:
            d_p = (d_p * d) // (balance * n_coins)

        numerator = (amp_times_n * sum_balances + d_p * n_coins) * d
        denominator = (amp_times_n - 1) * d + S(n_coins + 1) * d_p
        if denominator == 0:
            return None
        return (numerator // denominator).value

    result = newton_iterate(
        step,
        sum_balances.value,
        threshold=config.convergence_threshold,
        max_iterations=config.max_iterations,
    )
    if isinstance(result, Failed):
        logger.warning(
            "stable_invariant_not_converged",
            reason=result.reason,
            last_value=result.last_value,
            n_coins=n_coins,
            amp=amp,
        )
        raise DNotConverge(f"Stable invariant did not converge: {result.reason}")

    logger.debug("stable_invariant_converged", iterations=result.iterations, d=result.value)
    return result.value


# =============================================================================
# Balance y
# =============================================================================


def get_y(
    xp: Sequence[int],
    x: int,
    amp: int,
    i: int,
    j: int,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> tuple[int, int]:
    """Solve for balance j given that balance i becomes x and D stays constant.

    Solves y^2 + c = y * (2y + b - D) with
        c = D^(n+1) / (n^n * Ann * prod_{k != j} x_k)
        b = sum_{k != j} x_k + D / Ann
    (x_i replaced by x), then adds a fixed bias so a slightly-low estimate can
    never make the invariant appear to decrease.

    Args:
        xp: Current normalized balances
        x: New balance of coin i
        amp: Amplification factor
        i: Index of the coin whose balance is set
        j: Index of the coin to solve for

    Returns:
        Tuple of (y + bias, D computed over xp)

    Raises:
        InvalidNumCoins: If there are not 2 to 4 coins
        InvalidInputs: If indices are invalid, the pool is empty or x is zero
        DNotConverge: If the invariant does not converge
        YNotConverge: If the y iteration does not converge
        Overflow: If y + bias exceeds u64
    """
    n_coins = _validate_coins(xp, amp)
    _validate_indices(i, j, n_coins)
    if x <= 0:
        raise InvalidInputs(f"New balance of coin {i} must be positive")

    d_value = compute_invariant(xp, amp, config=config)
    if d_value == 0:
        raise InvalidInputs("Cannot solve for a balance in an empty pool")

    d = S(d_value)
    amp_times_n = S(amp) * n_coins

    others = [x if k == i else xp[k] for k in range(n_coins) if k != j]
    c = d
    sum_others = SafeInt.zero()
    for balance in sort_ascending(others):
        sum_others = sum_others + balance
        c = (c * d) // (S(balance) * n_coins)
    c = (c * d) // (amp_times_n * n_coins)
    b = sum_others + d // amp_times_n

    def step(y_value: int) -> int | None:
        y = S(y_value)
        # 2y + b - D must stay positive for the update to be defined
        twice_y_plus_b = y * 2 + b
        if twice_y_plus_b <= d:
            return None
        return ((y * y + c) // (twice_y_plus_b - d)).value

    result = newton_iterate(
        step,
        d_value,
        threshold=config.convergence_threshold,
        max_iterations=config.max_iterations,
    )
    if isinstance(result, Failed):
        logger.warning(
            "stable_get_y_not_converged",
            reason=result.reason,
            last_value=result.last_value,
            i=i,
            j=j,
        )
        raise YNotConverge(f"Stable balance did not converge: {result.reason}")

    y = S(result.value) + config.y_bias
    if not y.is_u64():
        raise Overflow(f"Solved balance {y} exceeds u64")
    return y.value, d_value


# =============================================================================
# Swaps
# =============================================================================


def _check_invariant(
    prev_invariant: int,
    balances_after: Sequence[int],
    amp: int,
    config: EngineConfig,
    operation: str,
) -> None:
    new_invariant = compute_invariant(balances_after, amp, config=config)
    if new_invariant + config.stable_invariant_tolerance < prev_invariant:
        logger.warning(
            "stable_invariant_decrease",
            operation=operation,
            prev_invariant=prev_invariant,
            new_invariant=new_invariant,
        )
        raise InvariantDecrease(
            f"{operation}: invariant fell from {prev_invariant} to {new_invariant}"
        )


def calc_out_given_in(
    amp: int,
    i: int,
    j: int,
    amount_in: int,
    xp: Sequence[int],
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Calculate the output amount of coin j for amount_in of coin i.

    Algorithm:
        1. new_balance_in = xp[i] + amount_in
        2. Solve new_balance_out = get_y(...) pivoting from i to j
        3. amount_out = xp[j] - new_balance_out
        4. Re-check the invariant over the updated balances

    Raises:
        InvalidInputs: If indices are invalid
        Overflow: If xp[i] + amount_in exceeds u64
        YNotDecreasing: If the solved output balance did not decrease
        InvariantDecrease: If the post-swap invariant check fails
    """
    n_coins = _validate_coins(xp, amp)
    _validate_indices(i, j, n_coins)
    if amount_in < 0:
        raise InvalidInputs(f"amount_in must be non-negative, got {amount_in}")

    new_balance_in = xp[i] + amount_in
    if new_balance_in > MAX_U64:
        raise Overflow(f"balance {xp[i]} + amount_in {amount_in} exceeds u64")

    new_balance_out, prev_invariant = get_y(xp, new_balance_in, amp, i, j, config=config)
    prev_balance_out = xp[j]
    if new_balance_out >= prev_balance_out:
        raise YNotDecreasing(
            f"Solved balance {new_balance_out} is not below current balance {prev_balance_out}"
        )
    amount_out = prev_balance_out - new_balance_out

    balances_after = list(xp)
    balances_after[i] = new_balance_in
    balances_after[j] = new_balance_out
    _check_invariant(prev_invariant, balances_after, amp, config, "out_given_in")

    logger.debug("stable_out_given_in", i=i, j=j, amount_in=amount_in, amount_out=amount_out)
    return amount_out


def calc_in_given_out(
    amp: int,
    i: int,
    j: int,
    amount_out: int,
    xp: Sequence[int],
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Calculate the input amount of coin i needed to take amount_out of coin j.

    Algorithm:
        1. new_balance_out = xp[j] - amount_out
        2. Solve new_balance_in = get_y(...) pivoting from j to i
        3. amount_in = new_balance_in - xp[i]
        4. Re-check the invariant over the updated balances

    Raises:
        InvalidInputs: If indices are invalid
        ValuesTooLarge: If amount_out >= xp[j]
        YNotIncreasing: If the solved input balance did not increase
        InvariantDecrease: If the post-swap invariant check fails
    """
    n_coins = _validate_coins(xp, amp)
    _validate_indices(i, j, n_coins)
    if amount_out < 0:
        raise InvalidInputs(f"amount_out must be non-negative, got {amount_out}")
    if amount_out >= xp[j]:
        raise ValuesTooLarge(f"amount_out {amount_out} must be less than balance {xp[j]}")

    new_balance_out = xp[j] - amount_out
    new_balance_in, prev_invariant = get_y(xp, new_balance_out, amp, j, i, config=config)
    prev_balance_in = xp[i]
    if new_balance_in <= prev_balance_in:
        raise YNotIncreasing(
            f"Solved balance {new_balance_in} is not above current balance {prev_balance_in}"
        )
    amount_in = new_balance_in - prev_balance_in

    balances_after = list(xp)
    balances_after[i] = new_balance_in
    balances_after[j] = new_balance_out
    _check_invariant(prev_invariant, balances_after, amp, config, "in_given_out")

    logger.debug("stable_in_given_out", i=i, j=j, amount_in=amount_in, amount_out=amount_out)
    return amount_in


# =============================================================================
# Liquidity
# =============================================================================


def compute_pool_tokens_issued(
    amp: int,
    deposits: Sequence[int],
    xp: Sequence[int],
    lp_supply: int,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """LP tokens issued for a deposit, proportional to the growth of D.

    issued = D1 for the first deposit (lp_supply == 0), otherwise
    floor(lp_supply * (D1 - D0) / D0).

    Raises:
        InvalidInputs: If shapes mismatch or a deposit is negative
        Overflow: If a post-deposit balance exceeds u64
        InvariantDecrease: If D1 < D0
        ValuesTooLarge: If issued exceeds u64
    """
    _validate_coins(xp, amp)
    if len(deposits) != len(xp):
        raise InvalidInputs(f"Got {len(deposits)} deposits but {len(xp)} balances")

    new_balances = []
    for k, (balance, deposit) in enumerate(zip(xp, deposits)):
        if deposit < 0:
            raise InvalidInputs(f"Deposit at index {k} must be non-negative")
        new_balance = balance + deposit
        if new_balance > MAX_U64:
            raise Overflow(f"balance {balance} + deposit {deposit} exceeds u64")
        new_balances.append(new_balance)

    d1 = compute_invariant(new_balances, amp, config=config)
    if lp_supply == 0:
        issued = S(d1)
    else:
        d0 = compute_invariant(xp, amp, config=config)
        if d0 == 0:
            raise InvalidInputs("Pool has LP supply but no balances")
        if d1 < d0:
            raise InvariantDecrease(f"deposit: invariant fell from {d0} to {d1}")
        issued = (S(lp_supply) * (S(d1) - d0)) // d0

    if not issued.is_u64():
        raise ValuesTooLarge(f"issued {issued} exceeds u64")

    logger.debug("stable_pool_tokens_issued", issued=issued.value, lp_supply=lp_supply)
    return issued.value
