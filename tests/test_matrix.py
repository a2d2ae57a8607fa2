"""Tests for the sparse ExtensorMatrix."""
import numpy as np
import pytest

from extcoding import Extensor, ExtensorMatrix


def e(i, coeff=1):
    return Extensor([coeff], [[i]])


def dense_multiply(num_rows, num_cols, values, vec):
    """Reference product over a full row-major array."""
    result = []
    for r in range(num_rows):
        acc = Extensor.zero()
        for c in range(num_cols):
            acc = acc + values[r * num_cols + c] * vec[c]
        result.append(acc)
    return result


def random_extensor(rng, max_index=12, max_terms=3):
    n_terms = int(rng.integers(0, max_terms + 1))
    coeffs = rng.integers(-3, 4, size=n_terms).tolist()
    bases = [
        rng.choice(max_index, size=int(rng.integers(1, 3)), replace=False).tolist()
        for _ in range(n_terms)
    ]
    return Extensor(coeffs, bases)


# ============================================================
# Construction
# ============================================================

def test_from_dense_skips_zero():
    values = [e(1), Extensor.zero(), Extensor.zero(), e(6, 4)]
    M = ExtensorMatrix.from_dense(2, 2, values)
    assert M.shape == (2, 2)
    assert M.nnz == 2
    assert M.get(0, 0) == e(1)
    assert M.get(1, 1) == e(6, 4)
    assert M.get(0, 1).is_zero()


def test_from_dense_wrong_size():
    with pytest.raises(ValueError):
        ExtensorMatrix.from_dense(2, 2, [e(1)] * 3)


def test_from_triples():
    M = ExtensorMatrix.from_triples(
        3, 2, [0, 2, 1], [1, 0, 0], [e(1), e(2), Extensor.zero()])
    assert M.nnz == 2
    assert M.get(2, 0) == e(2)
    assert M.get(1, 0).is_zero()


def test_from_triples_duplicate():
    with pytest.raises(ValueError, match="Duplicate"):
        ExtensorMatrix.from_triples(2, 2, [0, 0], [1, 1], [e(1), e(2)])


def test_from_triples_out_of_range():
    with pytest.raises(ValueError):
        ExtensorMatrix.from_triples(2, 2, [2], [0], [e(1)])


# ============================================================
# Matrix-vector product
# ============================================================

def test_multiply_vector():
    vec = [e(3, 5), e(4, 6)]
    M = ExtensorMatrix.from_dense(2, 2, [e(1), e(2, 2), e(5, 3), e(6, 4)])
    res = M.multiply_vector(vec)
    expect = [
        Extensor([5, 12], [[1, 3], [2, 4]]),
        Extensor([-15, -24], [[3, 5], [4, 6]]),
    ]
    assert res == expect
    assert M @ vec == expect


def test_multiply_vector_empty_row():
    M = ExtensorMatrix.from_dense(2, 2, [e(1), Extensor.zero(),
                                         Extensor.zero(), Extensor.zero()])
    res = M.multiply_vector([e(2), e(3)])
    assert res[0] == Extensor([1], [[1, 2]])
    assert res[1].is_zero()


def test_multiply_vector_length_mismatch():
    M = ExtensorMatrix.from_dense(1, 2, [e(1), e(2)])
    with pytest.raises(ValueError):
        M.multiply_vector([e(3)])


def test_rectangular():
    M = ExtensorMatrix.from_dense(1, 3, [e(1), e(2), e(3)])
    res = M.multiply_vector([e(4), e(5), e(6)])
    assert len(res) == 1
    assert res[0] == Extensor([1, 1, 1], [[1, 4], [2, 5], [3, 6]])


def test_matches_dense_reference():
    """Sparse product equals the dense product for random inputs."""
    rng = np.random.default_rng(42)
    for trial in range(10):
        num_rows, num_cols = int(rng.integers(1, 5)), int(rng.integers(1, 5))
        values = [
            random_extensor(rng) if rng.random() < 0.5 else Extensor.zero()
            for _ in range(num_rows * num_cols)
        ]
        vec = [random_extensor(rng) for _ in range(num_cols)]
        M = ExtensorMatrix.from_dense(num_rows, num_cols, values)
        assert M.multiply_vector(vec) == dense_multiply(
            num_rows, num_cols, values, vec), f"trial {trial}"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
