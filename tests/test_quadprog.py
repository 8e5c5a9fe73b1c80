import numpy as np
import pytest

from genolayout.quadprog import InfeasibleProblemError, QPError, solve_qp


def test_unconstrained_minimum():
    x = solve_qp(np.eye(2), [-1, -2], np.zeros((2, 0)), [])
    assert x == pytest.approx([1, 2])


def test_inactive_constraint_is_ignored():
    # x >= 0 holds at the unconstrained minimum
    x = solve_qp(np.eye(2), [-1, -1], np.eye(2), [0, 0])
    assert x == pytest.approx([1, 1])


def test_single_inequality():
    # x1 + x2 <= 1
    x = solve_qp(np.eye(2), [-1, -1], [[-1], [-1]], [-1])
    assert x == pytest.approx([0.5, 0.5])


def test_upper_bound():
    # minimize (x - 3)^2 with x <= 2
    x = solve_qp([[2.0]], [-6.0], [[-1.0]], [-2.0])
    assert x == pytest.approx([2.0])


def test_equality_constraint():
    x = solve_qp(np.eye(2), [0, 0], [[1], [1]], [3], meq=1)
    assert x == pytest.approx([1.5, 1.5])


def test_ordering_constraints():
    # pull both points towards 0 while keeping them 1 apart and non-negative
    C = np.array([[-1.0, 1.0, 0.0],
                  [1.0, 0.0, 1.0]])
    x = solve_qp(np.eye(2), [0, 0], C, [1, 0, 0])
    assert x == pytest.approx([0, 1], abs=1e-8)


def test_infeasible_constraints():
    # x >= 1 and x <= 0
    with pytest.raises(InfeasibleProblemError):
        solve_qp([[1.0]], [0.0], [[1.0, -1.0]], [1.0, 0.0])


def test_matrix_must_be_positive_definite():
    with pytest.raises(QPError):
        solve_qp([[0.0]], [0.0], [[1.0]], [0.0])
    with pytest.raises(QPError):
        solve_qp([[-1.0]], [0.0], [[1.0]], [0.0])


def test_dimensions_must_agree():
    with pytest.raises(QPError):
        solve_qp(np.eye(2), [0, 0, 0], np.eye(2), [0, 0])
