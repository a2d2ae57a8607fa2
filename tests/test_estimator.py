"""Tests for the sequential walk-count estimator and path detection."""
import itertools

import pytest

from extcoding import Graph, SequentialEstimator, estimate_walks, detect_path, t_value
from extcoding.estimator import max_trials, mean, std_dev


def path_graph(n):
    edges = []
    for i in range(n - 1):
        edges += [(i, i + 1), (i + 1, i)]
    return Graph.from_edges(edges, n)


# ============================================================
# Helpers
# ============================================================

class TestHelpers:

    def test_t_table(self):
        assert t_value(0) == 3.747
        assert t_value(4) == 3.747
        assert t_value(5) == 2.896
        assert t_value(16) == 2.583
        assert t_value(30) == 2.457
        assert t_value(64) == 2.390
        assert t_value(100) == 2.358
        assert t_value(129) == 2.326

    def test_t_exact_agrees_with_table(self):
        for dof, expected in [(4, 3.747), (8, 2.896), (16, 2.583)]:
            assert abs(t_value(dof, exact=True) - expected) < 1e-3

    def test_max_trials(self):
        assert max_trials(2, 0.5) == 16
        assert max_trials(3, 0.8) == 15
        assert max_trials(2, 0.3) == 45

    def test_mean_std(self):
        assert mean([1.0, 2.0, 3.0]) == 2.0
        assert std_dev([2.0, 2.0]) == 0.0
        assert abs(std_dev([1.0, 3.0]) - 1.0) < 1e-12

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            mean([])
        with pytest.raises(ValueError):
            std_dev([])


# ============================================================
# Parameter validation
# ============================================================

@pytest.mark.parametrize("k, eps", [(1, 0.5), (16, 0.5), (3, 0.0), (3, 1.0), (3, -0.2)])
def test_invalid_params(k, eps):
    with pytest.raises(ValueError):
        SequentialEstimator(path_graph(3), k, eps)


# ============================================================
# Stopping rule
# ============================================================

class TestStoppingRule:

    def test_empty_graph_stops_after_min_steps(self):
        """All samples 0 -> zero variance -> stops at step 31."""
        g = Graph.from_edges([], 3)
        result = estimate_walks(g, 2, 0.3, rng=0)
        assert result["estimate"] == 0.0
        assert result["steps"] == 31
        assert result["converged"]
        assert len(result["values"]) == 31

    def test_constant_samples(self, monkeypatch):
        monkeypatch.setattr(SequentialEstimator, "sample", lambda self: 3.0)
        result = SequentialEstimator(path_graph(3), 3, 0.2, rng=0).run()
        assert result["estimate"] == 3.0
        assert result["steps"] == 31
        assert result["std_dev"] == 0.0

    def test_cap_below_min_steps(self, monkeypatch):
        monkeypatch.setattr(SequentialEstimator, "sample", lambda self: 1.0)
        result = SequentialEstimator(path_graph(3), 2, 0.5, rng=0).run()
        assert result["steps"] == 16
        assert not result["converged"]
        assert result["estimate"] == 1.0

    def test_cap_with_noisy_samples(self, monkeypatch):
        """Zero-mean samples never satisfy the rule; the cap ends the run."""
        it = itertools.cycle([1.0, -1.0])
        monkeypatch.setattr(SequentialEstimator, "sample", lambda self: next(it))
        result = SequentialEstimator(path_graph(3), 2, 0.3, rng=0).run()
        assert result["steps"] == 45
        assert not result["converged"]
        assert len(result["means"]) == 45

    def test_converges_on_steady_mean(self, monkeypatch):
        it = itertools.cycle([9.0, 11.0])
        monkeypatch.setattr(SequentialEstimator, "sample", lambda self: next(it))
        result = SequentialEstimator(path_graph(3), 3, 0.2, rng=0).run()
        assert result["converged"]
        assert 31 <= result["steps"] < max_trials(3, 0.2)
        assert abs(result["estimate"] - 10.0) < 1.0


# ============================================================
# End to end
# ============================================================

class TestEstimate:

    def test_single_edge_scenario(self):
        """One edge 0 -> 1, k = 2: samples are ±det/2 in {-1, 0, 1}."""
        g = Graph.from_edges([(0, 1)], 2, 2)
        result = estimate_walks(g, 2, 0.3, rng=1)
        assert set(result["values"]) <= {-1.0, 0.0, 1.0}
        assert 31 <= result["steps"] <= 45
        assert abs(result["estimate"]) <= 1.0

    def test_seeded_runs_repeat(self):
        g = path_graph(4)
        r1 = estimate_walks(g, 3, 0.5, rng=9)
        r2 = estimate_walks(g, 3, 0.5, rng=9)
        assert r1["values"] == r2["values"]
        assert r1["estimate"] == r2["estimate"]

    def test_squared_counts_paths(self):
        """Path 0-1-2 has 4 directed 2-vertex paths."""
        result = estimate_walks(path_graph(3), 2, 0.5, rng=7, squared=True)
        assert all(v in (0.0, 4.0, 8.0) for v in result["values"])
        assert 1.0 <= result["estimate"] <= 7.0

    def test_exact_t(self):
        g = Graph.from_edges([], 2)
        result = estimate_walks(g, 2, 0.3, rng=0, exact_t=True)
        assert result["steps"] == 31
        assert abs(result["t_value"] - 2.457) < 0.01

    def test_verbose(self, capsys):
        g = Graph.from_edges([], 2)
        estimate_walks(g, 2, 0.5, rng=0, verbose=True)
        out = capsys.readouterr().out
        assert "[walks]" in out
        assert "trial cap reached" in out


# ============================================================
# Path detection
# ============================================================

class TestDetectPath:

    def test_path3(self):
        g = path_graph(3)
        assert detect_path(g, 2)
        assert detect_path(g, 3)
        assert not detect_path(g, 4)

    def test_path4(self):
        assert detect_path(path_graph(4), 4)

    def test_directed_chain(self):
        g = Graph.from_edges([(0, 1), (1, 2)], 3)
        assert detect_path(g, 3)
        assert not detect_path(Graph.from_edges([(0, 1), (2, 1)], 3), 3)

    def test_no_edges(self):
        assert not detect_path(Graph.from_edges([], 3), 2)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
