"""
Extensor Matrix: sparse (row, col, value) triples over extensors.

Only nonzero entries are stored. Row and column indices are kept as int32
numpy arrays, values as a parallel tuple of Extensor objects.

Usage:
    from extcoding import Extensor, ExtensorMatrix
    M = ExtensorMatrix.from_dense(2, 2, [e1, e2, Extensor.zero(), e4])
    y = M.multiply_vector([x0, x1])
"""

import numpy as np

from extcoding.extensor import Extensor


class ExtensorMatrix:
    """
    Sparse matrix whose entries are extensors.

    Parameters
    ----------
    num_rows, num_cols : int
        Matrix dimensions.
    rows, cols : array-like of int
        Index of each stored entry.
    values : sequence of Extensor
        Entry values, parallel to rows/cols.

    Use :meth:`from_dense` or :meth:`from_triples`; they validate input and
    drop zero entries.
    """

    def __init__(self, num_rows, num_cols, rows, cols, values):
        self.num_rows = num_rows
        self.num_cols = num_cols
        self.rows = np.asarray(rows, dtype=np.int32)
        self.cols = np.asarray(cols, dtype=np.int32)
        self.values = tuple(values)
        self.rows.flags.writeable = False
        self.cols.flags.writeable = False

    @classmethod
    def from_triples(cls, num_rows, num_cols, rows, cols, values):
        """
        Build from coordinate triples, skipping zero values.

        Raises
        ------
        ValueError
            On length mismatch, an index out of range, or a repeated
            (row, col) pair.
        """
        if not (len(rows) == len(cols) == len(values)):
            raise ValueError(
                f"rows, cols and values must have equal length, got "
                f"{len(rows)}, {len(cols)}, {len(values)}")

        keep_rows, keep_cols, keep_vals = [], [], []
        seen = set()
        for r, c, v in zip(rows, cols, values):
            r, c = int(r), int(c)
            if not (0 <= r < num_rows and 0 <= c < num_cols):
                raise ValueError(
                    f"Entry ({r}, {c}) outside {num_rows} x {num_cols} matrix")
            if (r, c) in seen:
                raise ValueError(f"Duplicate entry at ({r}, {c})")
            seen.add((r, c))
            if v.is_zero():
                continue
            keep_rows.append(r)
            keep_cols.append(c)
            keep_vals.append(v)

        return cls(num_rows, num_cols, keep_rows, keep_cols, keep_vals)

    @classmethod
    def from_dense(cls, num_rows, num_cols, values):
        """
        Build from a row-major list of num_rows * num_cols extensors.

        Zero entries (per ``is_zero``) are not stored.
        """
        if len(values) != num_rows * num_cols:
            raise ValueError(
                f"Expected {num_rows * num_cols} values for a "
                f"{num_rows} x {num_cols} matrix, got {len(values)}")
        rows, cols, vals = [], [], []
        for i, v in enumerate(values):
            if not v.is_zero():
                rows.append(i // num_cols)
                cols.append(i % num_cols)
                vals.append(v)
        return cls(num_rows, num_cols, rows, cols, vals)

    @property
    def shape(self):
        return (self.num_rows, self.num_cols)

    @property
    def nnz(self):
        return len(self.values)

    def get(self, i, j):
        """Entry (i, j), or the zero extensor if not stored."""
        hits = np.flatnonzero((self.rows == i) & (self.cols == j))
        if len(hits) == 0:
            return Extensor.zero()
        return self.values[hits[0]]

    def multiply_vector(self, vec):
        """
        Matrix-vector product over the exterior algebra.

        result[r] = sum over stored (r, c, v) of v ∧ vec[c]

        Parameters
        ----------
        vec : sequence of Extensor
            Length num_cols.

        Returns
        -------
        list of Extensor
            Length num_rows.
        """
        if len(vec) != self.num_cols:
            raise ValueError(
                f"Vector length {len(vec)} does not match "
                f"{self.num_cols} matrix columns")

        result = [Extensor.zero()] * self.num_rows
        for r, c, v in zip(self.rows.tolist(), self.cols.tolist(), self.values):
            result[r] = result[r].add(v.multiply(vec[c]))
        return result

    def __matmul__(self, vec):
        return self.multiply_vector(vec)

    def __repr__(self):
        return (f"ExtensorMatrix(rows={self.num_rows:,}, "
                f"cols={self.num_cols:,}, nnz={self.nnz:,})")
