"""Engine constants.

Centralizes the amount-type bounds and the numeric parameters of the
invariant solvers.
"""

# Amounts (balances, deposits, swap amounts) are unsigned 64-bit integers
MAX_U64 = 2**64 - 1

# Newton-Raphson: converged once two successive iterates differ by at most
# this many units. Absolute, tied to the integer scale of normalized amounts.
CONVERGENCE_THRESHOLD = 3

# Newton-Raphson iteration cap for both D and y solves
MAX_NEWTON_ITERATIONS = 100

# Added to the solved stable balance so a slightly-low Newton estimate
# cannot make the invariant appear to decrease after the swap
Y_BIAS = 10

# Stable pools: allowed post-swap shortfall of D, in invariant units
STABLE_INVARIANT_TOLERANCE = 5

# Weighted pools: allowed post-swap shortfall of K, in raw Q64.64 units
# (2^16 raw ~= 3.6e-15 of one invariant unit)
WEIGHTED_INVARIANT_TOLERANCE_RAW = 1 << 16

# Stable pools support exactly these coin counts
MIN_STABLE_COINS = 2
MAX_STABLE_COINS = 4

# Integer-percentage weights must sum to this value
PERCENT_WEIGHT_TOTAL = 100
