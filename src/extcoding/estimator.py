"""
Sequential Estimator: Monte Carlo walk counting with a Student-t stop rule.

Each trial draws fresh ±1 coding vectors, computes the walk sum of the
graph and turns its surviving coefficient into a sample

    x_j = coef / k!          (|coef| / k! with squared coding)

The running mean is returned once enough trials agree:

    step > MIN_STEPS  and  (sd == 0  or  mean - t * sd / sqrt(step) > (1 - eps) * mean)

where sd is the standard deviation of the sequence of running means and
t a one-sided 99% Student-t critical value. The run always stops after
ceil(k^2 / eps^2) trials.

Usage:
    from extcoding import Graph, estimate_walks
    g = Graph.from_graph6("path3.g6")
    result = estimate_walks(g, k=3, eps=0.5, rng=1, squared=True)
    result["estimate"]
"""

import math
import sys
import time

import numpy as np
from scipy import stats

from extcoding.extensor import MAX_BASIS
from extcoding.graph import create_bernoulli, create_vandermonde

MIN_STEPS = 30
CONFIDENCE = 0.99

# (degrees of freedom upper bound, one-sided 99% critical value)
T_TABLE = (
    (4, 3.747),
    (8, 2.896),
    (16, 2.583),
    (32, 2.457),
    (64, 2.390),
    (128, 2.358),
)
T_INFINITY = 2.326


# ============================================================
# Statistics helpers
# ============================================================

def mean(values):
    """Arithmetic mean; raises ValueError on an empty sequence."""
    if len(values) == 0:
        raise ValueError("mean of empty sequence (check k and eps)")
    return float(np.mean(values))


def std_dev(values):
    """Population standard deviation; raises ValueError on an empty sequence."""
    if len(values) == 0:
        raise ValueError("standard deviation of empty sequence (check k and eps)")
    return float(np.std(values))


def t_value(dof, exact=False):
    """
    One-sided 99% Student-t critical value.

    Parameters
    ----------
    dof : int
        Degrees of freedom.
    exact : bool
        If True use scipy.stats.t.ppf instead of the bucketed table.
    """
    if exact:
        return float(stats.t.ppf(CONFIDENCE, max(dof, 1)))
    for bound, value in T_TABLE:
        if dof <= bound:
            return value
    return T_INFINITY


def max_trials(k, eps):
    """Hard trial cap ceil(k^2 / eps^2)."""
    return math.ceil(k ** 2 / eps ** 2)


def _check_params(k, eps=None):
    if k < 2:
        raise ValueError(f"Walk length k must be >= 2, got {k}")
    if 2 * k >= MAX_BASIS:
        raise ValueError(
            f"k={k} needs {2 * k} generators, MAX_BASIS is {MAX_BASIS}")
    if eps is not None and not 0 < eps < 1:
        raise ValueError(f"eps must lie in (0, 1), got {eps}")


# ============================================================
# SequentialEstimator
# ============================================================

class SequentialEstimator:
    """
    Estimate the walk count of a graph by repeated random coding.

    Parameters
    ----------
    graph : Graph
        Input graph. Its adjacency pattern is reused by every trial.
    k : int
        Walk length (vertices per walk), 2 <= k and 2k < MAX_BASIS.
    eps : float
        Target relative precision, 0 < eps < 1.
    rng : numpy.random.Generator, int or None
        Random source, created once per run.
    squared : bool
        Use squared coding x ∧ x.lift(k) and |coef| samples, which makes
        the mean estimate the number of k-vertex paths.
    exact_t : bool
        Use exact Student-t quantiles instead of the bucket table.
    min_steps : int
        Trials required before the stop rule may fire.
    verbose : bool
        Print progress.
    """

    def __init__(self, graph, k, eps, rng=None, squared=False,
                 exact_t=False, min_steps=MIN_STEPS, verbose=False):
        _check_params(k, eps)
        self.graph = graph
        self.k = k
        self.eps = eps
        self.rng = np.random.default_rng(rng)
        self.squared = squared
        self.exact_t = exact_t
        self.min_steps = min_steps
        self.verbose = verbose

        self.denom = float(math.factorial(k))
        self.max_steps = max_trials(k, eps)

    def sample(self):
        """One trial: fresh coding, walk sum, scaled coefficient."""
        coding = create_bernoulli(
            self.graph.num_vertices, self.k, rng=self.rng, squared=self.squared)
        v = self.graph.compute_walk_sum(self.k, coding)
        coeffs = v.coefficients()
        coef = coeffs[0] if coeffs else 0
        if self.squared:
            coef = abs(coef)
        return coef / self.denom

    def should_stop(self, step, mean_val, std_val, t_val):
        if step <= self.min_steps:
            return False
        if std_val == 0:
            return True
        return mean_val - t_val * std_val / math.sqrt(step) > (1 - self.eps) * mean_val

    def run(self):
        """
        Run trials until the stop rule fires or the cap is reached.

        Returns
        -------
        dict with keys:
            estimate : float, final running mean
            steps : int, number of trials performed
            converged : bool, False if the cap was hit first
            std_dev : float, std of the running means at the end
            t_value : float, critical value used in the last check
            values, means : list of float, per-trial samples and running means
            time_total : float, seconds
        """
        t0 = time.time()
        values = []
        means = []

        if self.verbose:
            print(f"  [walks] {self.graph!r}, k={self.k}, eps={self.eps}, "
                  f"cap={self.max_steps:,}, squared={self.squared}")
            sys.stdout.flush()

        step = 1
        converged = False
        while True:
            values.append(self.sample())
            mean_val = mean(values)
            means.append(mean_val)
            std_val = std_dev(means)
            t_val = t_value(step - 1, exact=self.exact_t)

            if self.verbose and (step % 10 == 0 or step == 1):
                print(f"  [walks] step {step:>6,}: mean={mean_val:.6g}, "
                      f"std={std_val:.3e}, t={t_val:.3f}")
                sys.stdout.flush()

            if self.should_stop(step, mean_val, std_val, t_val):
                converged = True
                break
            if step >= self.max_steps:
                break
            step += 1

        elapsed = time.time() - t0
        if self.verbose:
            status = "converged" if converged else "trial cap reached"
            print(f"  [walks] {status} after {step:,} steps: "
                  f"estimate={mean_val:.6g} [{elapsed:.1f}s]")
            sys.stdout.flush()

        return {
            "estimate": mean_val,
            "steps": step,
            "converged": converged,
            "std_dev": std_val,
            "t_value": t_val,
            "values": values,
            "means": means,
            "time_total": elapsed,
        }


# ============================================================
# Convenience wrappers
# ============================================================

def estimate_walks(graph, k, eps, rng=None, squared=False, exact_t=False,
                   verbose=False):
    """
    Estimate the walk count of ``graph`` for walks with k vertices.

    See :class:`SequentialEstimator` for parameters.

    Returns
    -------
    dict
        Result of :meth:`SequentialEstimator.run`.
    """
    estimator = SequentialEstimator(
        graph, k, eps, rng=rng, squared=squared, exact_t=exact_t,
        verbose=verbose,
    )
    return estimator.run()


def detect_path(graph, k):
    """
    Decide whether ``graph`` contains a path through k distinct vertices.

    Uses the deterministic Vandermonde coding with squared lift: every
    path contributes s * det(X)^2 with a sign s fixed by k, so
    contributions cannot cancel. Exact for graphs small enough that the int64
    coefficients do not overflow.
    """
    _check_params(k)
    coding = create_vandermonde(graph.num_vertices, k, squared=True)
    return not graph.compute_walk_sum(k, coding).is_zero()
