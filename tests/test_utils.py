import numpy as np
import pytest

from minimizers.utils import (
    box_projection,
    infinity_norm,
    is_out_of_domain,
    symmetrize,
    try_inverse,
    validate_bounds,
)


def test_box_projection_clamps_componentwise():
    x = np.array([-2.0, 0.5, 3.0])
    lower = np.zeros(3)
    upper = np.ones(3)
    assert np.array_equal(box_projection(x, lower, upper), [0.0, 0.5, 1.0])
    # input untouched
    assert np.array_equal(x, [-2.0, 0.5, 3.0])


def test_box_projection_is_idempotent(rng):
    lower = -rng.random(5)
    upper = rng.random(5)
    x = 3.0 * rng.standard_normal(5)
    once = box_projection(x, lower, upper)
    assert np.array_equal(box_projection(once, lower, upper), once)
    assert np.all(once >= lower) and np.all(once <= upper)


def test_box_projection_with_infinite_bounds():
    x = np.array([-10.0, 10.0])
    lower = np.array([-np.inf, 0.0])
    upper = np.array([0.0, np.inf])
    assert np.array_equal(box_projection(x, lower, upper), [-10.0, 10.0])


def test_infinity_norm():
    assert infinity_norm(np.array([1.0, -4.0, 2.0])) == 4.0
    assert infinity_norm(np.array([])) == 0.0


def test_is_out_of_domain():
    assert is_out_of_domain(float("nan"))
    assert is_out_of_domain(float("inf"))
    assert is_out_of_domain(-np.inf)
    assert not is_out_of_domain(1e300)


def test_try_inverse():
    mat = np.array([[2.0, 0.0], [0.0, 4.0]])
    assert np.allclose(try_inverse(mat), np.diag([0.5, 0.25]))
    assert try_inverse(np.array([[1.0, 2.0], [2.0, 4.0]])) is None


def test_symmetrize():
    mat = np.array([[1.0, 2.0], [0.0, 1.0]])
    sym = symmetrize(mat)
    assert np.array_equal(sym, sym.T)
    assert np.array_equal(sym, [[1.0, 1.0], [1.0, 1.0]])


def test_validate_bounds_errors():
    with pytest.raises(ValueError, match="same length"):
        validate_bounds(np.zeros(2), np.ones(3))
    with pytest.raises(ValueError, match="must not exceed"):
        validate_bounds(np.array([1.0]), np.array([0.0]))
    with pytest.raises(ValueError, match="dimension"):
        validate_bounds(np.zeros(2), np.ones(2), dim=3)
