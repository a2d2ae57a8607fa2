"""
Graph Coding: adjacency pattern, random coding vectors and walk sums.

A graph is kept as a fixed 0/1 scipy.sparse CSR pattern. For each trial
the pattern is combined with fresh coding vectors into an ExtensorMatrix
whose entry (u, v) is the coding vector of u, so the product

    A · (A · ( ... A · coding))        (k-1 multiplications)

sums c_{v1} ∧ c_{v2} ∧ ... ∧ c_{vk} over all walks v1 -> ... -> vk.
Walks that revisit a vertex vanish (x ∧ x = 0).

Input formats:
  - KONECT-style TSV ("% ..." comment lines, 1-based "from to" edges)
  - graph6 (undirected, optional ">>graph6<<" header)

Usage:
    from extcoding.graph import Graph, create_bernoulli
    g = Graph.from_tsv("out.brunson_revolution_revolution")
    coding = create_bernoulli(g.num_vertices, k=3, rng=42)
    v = g.compute_walk_sum(3, coding)
"""

import numpy as np
from scipy import sparse

from extcoding.extensor import Extensor
from extcoding.matrix import ExtensorMatrix


# ============================================================
# Coding vectors
# ============================================================

def _lifted(x, k, squared):
    lifted = x.lift(k)
    if squared:
        return x.multiply(lifted)
    return lifted


def create_bernoulli(n, k, rng=None, squared=False):
    """
    Random ±1 coding vector for each of n vertices.

    Each vertex draws k independent uniform signs placed on generators
    e_1..e_k, then the vector is lifted by k.

    Parameters
    ----------
    n : int
        Number of vertices.
    k : int
        Walk length (number of vertices per walk).
    rng : numpy.random.Generator, int or None
        Random source; an int seeds a new generator. Pass the same
        Generator across trials instead of reseeding.
    squared : bool
        If True return x ∧ x.lift(k) (generators e_1..e_2k), whose k-fold
        products are ±det(X)^2. Otherwise return x.lift(k).

    Returns
    -------
    list of Extensor
    """
    rng = np.random.default_rng(rng)
    signs = rng.integers(0, 2, size=(n, k)) * 2 - 1
    basis = [[j] for j in range(1, k + 1)]
    return [_lifted(Extensor(row, basis), k, squared) for row in signs.tolist()]


def create_vandermonde(n, k, squared=True):
    """Deterministic coding v -> (v^0, v^1, ..., v^(k-1)) for v = 1..n."""
    basis = [[j] for j in range(1, k + 1)]
    coding = []
    for v in range(1, n + 1):
        coeffs = [v ** i for i in range(k)]
        coding.append(_lifted(Extensor(coeffs, basis), k, squared))
    return coding


# ============================================================
# Walk sum
# ============================================================

def compute_walk_sum(matrix, coding, k):
    """
    Sum of wedge products along all walks with k vertices.

    Parameters
    ----------
    matrix : ExtensorMatrix
        Coded adjacency matrix.
    coding : sequence of Extensor
        Coding vectors, length matrix.num_cols.
    k : int
        Walk length, >= 2. Performs k-1 matrix-vector products.

    Returns
    -------
    Extensor
    """
    if k < 2:
        raise ValueError(f"Walk length k must be >= 2, got {k}")

    b = matrix.multiply_vector(coding)
    for _ in range(k - 2):
        b = matrix.multiply_vector(b)

    total = Extensor.zero()
    for e in b:
        total = total.add(e)
    return total


# ============================================================
# Graph
# ============================================================

class Graph:
    """
    Directed graph stored as a 0/1 sparse adjacency pattern.

    Parameters
    ----------
    adjacency : scipy.sparse matrix or numpy.ndarray
        Nonzero (u, v) means an edge u -> v. Multiplicities are dropped.
    """

    def __init__(self, adjacency):
        adj = sparse.csr_matrix(adjacency)
        adj = (adj != 0).astype(np.int8).tocsr()
        adj.sort_indices()
        self.adjacency = adj

        coo = adj.tocoo()
        self._rows = coo.row.astype(np.int32)
        self._cols = coo.col.astype(np.int32)

    @classmethod
    def from_edges(cls, edges, num_rows, num_cols=None):
        """
        Build from 0-based (from, to) pairs.

        Repeated edges collapse into one entry.
        """
        if num_cols is None:
            num_cols = num_rows
        edges = np.asarray(edges, dtype=np.int64).reshape(-1, 2)
        rows, cols = edges[:, 0], edges[:, 1]
        bad = (rows < 0) | (rows >= num_rows) | (cols < 0) | (cols >= num_cols)
        if bad.any():
            i = int(np.flatnonzero(bad)[0])
            raise ValueError(
                f"Edge ({rows[i]}, {cols[i]}) outside "
                f"{num_rows} x {num_cols} adjacency")
        adj = sparse.coo_matrix(
            (np.ones(len(rows), dtype=np.int32), (rows, cols)),
            shape=(num_rows, num_cols),
        )
        return cls(adj)

    @classmethod
    def from_tsv(cls, path):
        """Square graph over max(rows, cols) vertices from a KONECT file."""
        num_rows, num_cols, edges = read_tsv(path)
        n = max(num_rows, num_cols)
        return cls.from_edges(edges, n, n)

    @classmethod
    def from_graph6(cls, path):
        n, edges = read_graph6(path)
        return cls.from_edges(edges, n, n)

    @property
    def shape(self):
        return self.adjacency.shape

    @property
    def num_vertices(self):
        return max(self.adjacency.shape)

    @property
    def num_edges(self):
        return int(self.adjacency.nnz)

    def edges(self):
        """Edges as (from, to) tuples in row-major order."""
        return list(zip(self._rows.tolist(), self._cols.tolist()))

    def coding_matrix(self, coding):
        """ExtensorMatrix with entry (u, v) = coding[u] for every edge u -> v."""
        num_rows, num_cols = self.shape
        if len(coding) < num_rows:
            raise ValueError(
                f"Need {num_rows} coding vectors, got {len(coding)}")
        values = [coding[r] for r in self._rows.tolist()]
        return ExtensorMatrix.from_triples(
            num_rows, num_cols, self._rows, self._cols, values)

    def compute_walk_sum(self, k, coding):
        """Walk sum of this graph under the given coding vectors."""
        num_rows, num_cols = self.shape
        if k > 2 and num_rows != num_cols:
            raise ValueError(
                f"Walks longer than 2 need a square adjacency, got "
                f"{num_rows} x {num_cols}")
        if len(coding) < num_cols:
            raise ValueError(
                f"Need {num_cols} coding vectors, got {len(coding)}")
        matrix = self.coding_matrix(coding)
        return compute_walk_sum(matrix, list(coding[:num_cols]), k)

    def __repr__(self):
        num_rows, num_cols = self.shape
        return f"Graph(rows={num_rows:,}, cols={num_cols:,}, edges={self.num_edges:,})"


# ============================================================
# Readers
# ============================================================

def read_tsv(path):
    """
    Read a KONECT-style adjacency file.

    The second line is a header "% <edges> <rows> <cols>"; row and column
    counts are its 3rd and 4th tokens. Other lines starting with "%" are
    comments. Every remaining non-blank line starts with two 1-based
    vertex indices "from to"; extra columns (weights, timestamps) are
    ignored.

    Returns
    -------
    (num_rows, num_cols, edges) with 0-based (from, to) tuples.

    Raises
    ------
    ValueError
        On a missing or malformed header or edge line.
    """
    with open(path) as f:
        lines = f.read().splitlines()

    if len(lines) < 2:
        raise ValueError(f"{path}: missing header line")
    header = lines[1].split()
    if len(header) < 4 or header[0] != "%":
        raise ValueError(f"{path}:2: malformed header {lines[1]!r}")
    try:
        num_rows, num_cols = int(header[2]), int(header[3])
    except ValueError as e:
        raise ValueError(f"{path}:2: malformed header {lines[1]!r}") from e

    edges = []
    for lineno, line in enumerate(lines, 1):
        if line.startswith("%") or not line.strip():
            continue
        tokens = line.split()
        if len(tokens) < 2:
            raise ValueError(f"{path}:{lineno}: expected 'from to', got {line!r}")
        try:
            frm, to = int(tokens[0]) - 1, int(tokens[1]) - 1
        except ValueError as e:
            raise ValueError(
                f"{path}:{lineno}: non-numeric vertex in {line!r}") from e
        edges.append((frm, to))

    return num_rows, num_cols, edges


def read_graph6(path):
    """
    Read the first graph of a graph6 file.

    Returns
    -------
    (n, edges) where edges lists both directions of every undirected edge.
    """
    with open(path, "rb") as f:
        content = f.read()

    if content.startswith(b">>graph6<<"):
        content = content[len(b">>graph6<<"):]
    lines = content.split(b"\n")
    data = lines[0].strip() if lines else b""
    if not data:
        raise ValueError(f"{path}: empty graph6 file")

    raw = np.frombuffer(data, dtype=np.uint8)
    if ((raw < 63) | (raw > 126)).any():
        raise ValueError(f"{path}: invalid graph6 byte")
    vals = raw - 63

    if vals[0] == 63:
        if len(vals) < 4 or vals[1] == 63:
            raise ValueError(f"{path}: unsupported graph6 size encoding")
        n = (int(vals[1]) << 12) | (int(vals[2]) << 6) | int(vals[3])
        body = vals[4:]
    else:
        n = int(vals[0])
        body = vals[1:]

    bits = np.unpackbits(body.reshape(-1, 1), axis=1)[:, 2:].ravel()
    needed = n * (n - 1) // 2
    if len(bits) < needed:
        raise ValueError(
            f"{path}: graph6 data too short for {n} vertices")

    edges = []
    pos = 0
    for j in range(1, n):
        for i in range(j):
            if bits[pos]:
                edges.append((i, j))
                edges.append((j, i))
            pos += 1
    return n, edges
