"""
Extensor Fast: Numba JIT-compiled kernels for the wedge product hot loop.

Blades are bit masks (bit i set <=> generator e_i present), stored as
int64 numpy arrays next to a parallel int64 coefficient array. These
kernels work on that packed layout directly.

Install: pip install numba
"""

import numpy as np
from numba import njit


# ============================================================
# Bit helpers
# ============================================================

@njit(cache=True)
def popcount(x):
    """Number of set bits in a non-negative mask."""
    count = 0
    while x:
        x &= x - 1
        count += 1
    return count


@njit(cache=True)
def blade_sign(a, b):
    """Sign of e_A ∧ e_B for disjoint blades A, B.

    Returns (-1)^m where m counts the pairs (i in A, j in B) with i > j,
    i.e. the transpositions needed to sort the concatenation A·B.

    Parameters
    ----------
    a, b : int64
        Disjoint blade masks.

    Returns
    -------
    int64
        +1 or -1.
    """
    m = 0
    rest = b
    while rest:
        low = rest & -rest
        # generators of A strictly above this generator of B
        m += popcount(a & ~((low << 1) - 1))
        rest ^= low
    if m % 2 == 0:
        return np.int64(1)
    return np.int64(-1)


# ============================================================
# Wedge kernel: all pairwise blade products
# ============================================================

@njit(cache=True)
def wedge_terms(masks_a, coeffs_a, masks_b, coeffs_b):
    """Expand the wedge product of two packed extensors.

    Produces one term per disjoint blade pair. Terms are NOT merged:
    the same output mask may appear several times.

    Parameters
    ----------
    masks_a, coeffs_a : 1D numpy arrays of int64
        Left operand.
    masks_b, coeffs_b : 1D numpy arrays of int64
        Right operand.

    Returns
    -------
    (masks, coeffs) : tuple of 1D numpy arrays of int64
    """
    n_a = len(masks_a)
    n_b = len(masks_b)
    out_masks = np.empty(n_a * n_b, dtype=np.int64)
    out_coeffs = np.empty(n_a * n_b, dtype=np.int64)
    n = 0
    for i in range(n_a):
        a = masks_a[i]
        for j in range(n_b):
            b = masks_b[j]
            if (a & b) == 0:
                out_masks[n] = a | b
                out_coeffs[n] = blade_sign(a, b) * coeffs_a[i] * coeffs_b[j]
                n += 1
    return out_masks[:n], out_coeffs[:n]


@njit(cache=True)
def shift_masks(masks, k):
    """Shift every blade up by k generators; returns (shifted, highest_bit)."""
    out = np.empty(len(masks), dtype=np.int64)
    top = np.int64(-1)
    for i in range(len(masks)):
        m = masks[i] << k
        out[i] = m
        bit = np.int64(-1)
        while m:
            m >>= 1
            bit += 1
        if bit > top:
            top = bit
    return out, top


def warmup():
    """Trigger JIT compilation on tiny inputs."""
    one = np.array([1], dtype=np.int64)
    two = np.array([2], dtype=np.int64)
    wedge_terms(one, one, two, one)
    shift_masks(one, 1)
