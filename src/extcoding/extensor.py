"""
Extensor: sparse elements of the exterior algebra.

An extensor maps blades (wedge products of distinct generators) to
nonzero integer coefficients. Blades are bit masks over at most
MAX_BASIS generators:

    mask        blade
    0b0000      1
    0b0010      e_1
    0b0110      e_1 ∧ e_2
    0b1010      e_1 ∧ e_3

Storage is two parallel read-only int64 arrays (masks ascending,
coefficients), so iteration order is canonical and equal values compare
equal. Zero coefficients are never stored: the empty extensor is the only
representation of zero.

Usage:
    from extcoding import Extensor
    x = Extensor([2, 3], [[1], [2]])          # 2 e_1 + 3 e_2
    y = Extensor([4, 5], [[1], [2]])
    x * y                                      # -2 e_1∧e_2
"""

import numpy as np

from extcoding import fast as _fast

MAX_BASIS = 32

_EMPTY = np.empty(0, dtype=np.int64)


def blade_mask(indices):
    """Bit mask of a set of basis indices.

    Raises
    ------
    ValueError
        If an index lies outside [0, MAX_BASIS).
    """
    mask = 0
    for i in indices:
        i = int(i)
        if not 0 <= i < MAX_BASIS:
            raise ValueError(
                f"Basis index {i} outside supported range [0, {MAX_BASIS})")
        mask |= 1 << i
    return mask


def blade_indices(mask):
    """Sorted basis indices of a blade mask."""
    mask = int(mask)
    return tuple(i for i in range(MAX_BASIS) if (mask >> i) & 1)


def _merge(masks, coeffs):
    """Sum repeated masks, drop zero sums, sort ascending."""
    if len(masks) == 0:
        return _EMPTY, _EMPTY
    uniq, inverse = np.unique(masks, return_inverse=True)
    sums = np.zeros(len(uniq), dtype=np.int64)
    np.add.at(sums, inverse.ravel(), coeffs)
    keep = sums != 0
    return uniq[keep], sums[keep]


class Extensor:
    """
    Immutable sparse extensor with integer coefficients.

    Parameters
    ----------
    coeffs : sequence of int
        One coefficient per blade.
    bases : sequence of sequence of int
        Basis indices of each blade, e.g. [[1, 3], [2]] for e_1∧e_3, e_2.
        A repeated blade keeps the last coefficient given for it.

    Examples
    --------
    >>> e1 = Extensor([1], [[1]])
    >>> e2 = Extensor([1], [[2]])
    >>> e2 * e1
    Extensor(-1 e_1∧e_2)
    >>> (e1 * e1).is_zero()
    True
    """

    __slots__ = ("_masks", "_coeffs")

    def __init__(self, coeffs=(), bases=()):
        if len(coeffs) != len(bases):
            raise ValueError(
                f"Number of coefficients ({len(coeffs)}) and basis blades "
                f"({len(bases)}) must match")

        data = {}
        for coeff, basis in zip(coeffs, bases):
            data[blade_mask(basis)] = int(coeff)

        masks = np.array(sorted(data), dtype=np.int64)
        values = np.array([data[m] for m in masks.tolist()], dtype=np.int64)
        keep = values != 0
        self._init_arrays(masks[keep], values[keep])

    def _init_arrays(self, masks, coeffs):
        masks = np.ascontiguousarray(masks, dtype=np.int64)
        coeffs = np.ascontiguousarray(coeffs, dtype=np.int64)
        masks.flags.writeable = False
        coeffs.flags.writeable = False
        self._masks = masks
        self._coeffs = coeffs

    @classmethod
    def _from_arrays(cls, masks, coeffs):
        """Wrap already canonical (sorted, unique, nonzero) arrays."""
        obj = cls.__new__(cls)
        obj._init_arrays(masks, coeffs)
        return obj

    @classmethod
    def zero(cls):
        """The empty extensor."""
        return cls._from_arrays(_EMPTY, _EMPTY)

    # ------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------

    def is_zero(self):
        return len(self._masks) == 0

    def add(self, other):
        """Componentwise sum; coefficients cancelling to 0 are dropped."""
        if other.is_zero():
            return self
        if self.is_zero():
            return other
        masks, coeffs = _merge(
            np.concatenate((self._masks, other._masks)),
            np.concatenate((self._coeffs, other._coeffs)),
        )
        return Extensor._from_arrays(masks, coeffs)

    def multiply(self, other):
        """Wedge product self ∧ other."""
        if self.is_zero() or other.is_zero():
            return Extensor.zero()
        masks, coeffs = _fast.wedge_terms(
            self._masks, self._coeffs, other._masks, other._coeffs)
        masks, coeffs = _merge(masks, coeffs)
        return Extensor._from_arrays(masks, coeffs)

    def scale(self, c):
        """Scalar multiple c * self."""
        c = int(c)
        if c == 0 or self.is_zero():
            return Extensor.zero()
        return Extensor._from_arrays(self._masks, self._coeffs * c)

    def lift(self, k):
        """
        Shift every basis index up by k, coefficients unchanged.

        Parameters
        ----------
        k : int
            Number of generator positions to shift by (>= 0).

        Raises
        ------
        ValueError
            If k is negative or a shifted index leaves [0, MAX_BASIS).
        """
        k = int(k)
        if k < 0:
            raise ValueError(f"Lift distance must be non-negative, got {k}")
        if k == 0 or not self._masks.any():
            # zero or scalar-only: no indices to shift
            return self
        if k >= MAX_BASIS:
            raise ValueError(f"Lift by {k} exceeds MAX_BASIS={MAX_BASIS}")
        shifted, top = _fast.shift_masks(self._masks, k)
        if top >= MAX_BASIS:
            raise ValueError(
                f"Lift by {k} moves basis index {int(top)} outside "
                f"[0, {MAX_BASIS})")
        return Extensor._from_arrays(shifted, self._coeffs)

    # ------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------

    def coefficients(self):
        """Coefficients in ascending blade order."""
        return self._coeffs.tolist()

    def masks(self):
        """Blade masks in ascending order."""
        return self._masks.tolist()

    def blades(self):
        """Blades as sorted index tuples, in ascending mask order."""
        return [blade_indices(m) for m in self._masks.tolist()]

    def grades(self):
        """Sorted list of the grades present."""
        return sorted({_fast.popcount(m) for m in self._masks.tolist()})

    def __len__(self):
        return len(self._masks)

    def __iter__(self):
        for mask, coeff in zip(self._masks.tolist(), self._coeffs.tolist()):
            yield blade_indices(mask), coeff

    # ------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, Extensor):
            return NotImplemented
        return (np.array_equal(self._masks, other._masks)
                and np.array_equal(self._coeffs, other._coeffs))

    __hash__ = None

    def __add__(self, other):
        if not isinstance(other, Extensor):
            return NotImplemented
        return self.add(other)

    def __neg__(self):
        return self.scale(-1)

    def __sub__(self, other):
        if not isinstance(other, Extensor):
            return NotImplemented
        return self.add(other.scale(-1))

    def __mul__(self, other):
        if isinstance(other, Extensor):
            return self.multiply(other)
        if isinstance(other, (int, np.integer)):
            return self.scale(other)
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, (int, np.integer)):
            return self.scale(other)
        return NotImplemented

    def __str__(self):
        if self.is_zero():
            return "0"
        terms = []
        for indices, coeff in self:
            if indices:
                blade = "∧".join(f"e_{i}" for i in indices)
                terms.append(f"{coeff} {blade}")
            else:
                terms.append(f"{coeff}")
        return " + ".join(terms)

    def __repr__(self):
        return f"Extensor({self})"
