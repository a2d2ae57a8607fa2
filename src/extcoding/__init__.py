"""
Extensor Coding - randomized walk counting in the exterior algebra
===================================================================

Each vertex gets a random ±1 vector in the exterior algebra; walk sums
reduce to sparse matrix-vector products over extensors, and a sequential
Monte Carlo estimator decides when the running mean has converged.

Quick start:
    import extcoding

    g = extcoding.Graph.from_tsv("out.brunson_revolution_revolution")
    result = extcoding.estimate_walks(g, k=3, eps=0.5, rng=0)
    result["estimate"]

    # Exact k-path detection on small graphs
    extcoding.detect_path(g, k=4)

License: MIT
"""

__version__ = "0.1.0"

from extcoding.extensor import Extensor, MAX_BASIS
from extcoding.matrix import ExtensorMatrix
from extcoding.graph import (
    Graph, create_bernoulli, create_vandermonde, compute_walk_sum,
    read_tsv, read_graph6,
)
from extcoding.estimator import (
    SequentialEstimator, estimate_walks, detect_path, t_value,
)

__all__ = [
    "Extensor", "MAX_BASIS", "ExtensorMatrix",
    "Graph", "create_bernoulli", "create_vandermonde", "compute_walk_sum",
    "read_tsv", "read_graph6",
    "SequentialEstimator", "estimate_walks", "detect_path", "t_value",
]
