"""
Walk-count benchmark: timing of the sequential estimator over k.
================================================================

For each k in 2..MAX_K runs the estimator NUM_ITER times on a KONECT
adjacency file and writes "k, mean_ms" lines to the results file.

Usage:
  pip install extensor-coding
  python run_walk_benchmark.py out.brunson_revolution_revolution [results.txt]
"""

import sys
import time

import numpy as np

from extcoding import Graph, estimate_walks
from extcoding import fast

# ── Config ──
NUM_ITER = 3
MAX_K = 8
EPS = 0.8
SEED = 0


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    graph_path = sys.argv[1]
    results_path = sys.argv[2] if len(sys.argv) > 2 else "bench_k_python.txt"

    g = Graph.from_tsv(graph_path)
    print(f"  Graph: {g!r}")

    print(f"  Warming up Numba JIT...")
    t0 = time.time()
    fast.warmup()
    print(f"  JIT warmup: {time.time()-t0:.1f}s")
    sys.stdout.flush()

    rng = np.random.default_rng(SEED)
    times = []
    for k in range(2, MAX_K + 1):
        times_per_run = []
        for _ in range(NUM_ITER):
            t0 = time.time()
            result = estimate_walks(g, k, EPS, rng=rng)
            times_per_run.append((time.time() - t0) * 1000.0)
        mean_ms = float(np.mean(times_per_run))
        times.append((k, mean_ms))
        print(f"  k={k}: {mean_ms:,.1f} ms/run, "
              f"last estimate={result['estimate']:.6g} ({result['steps']} steps)")
        sys.stdout.flush()

    with open(results_path, "w") as f:
        for k, t in times:
            f.write(f"{k}, {t}\n")
    print(f"  Saved: {results_path}")


if __name__ == '__main__':
    main()
