import numpy as np
import pytest

from genolayout.arrays import AlignmentArrays
from genolayout.errors import AlignmentBugError
from genolayout.refine import refine_positions


def trio_arrays():
    arrays = AlignmentArrays.empty(2, 2)
    arrays.nid[0] = [0, 1]
    arrays.pos[0] = [0, 1]
    arrays.spouse[0, 0] = True
    arrays.n[0] = 2
    arrays.nid[1, 0] = 2
    arrays.fam[1, 0] = 1
    arrays.n[1] = 1
    return arrays


def test_child_centered_under_parents():
    pos = refine_positions(trio_arrays())
    assert pos[0, 0] == pytest.approx(0, abs=1e-4)
    assert pos[0, 1] == pytest.approx(1, abs=1e-4)
    assert pos[1, 0] == pytest.approx(0.5, abs=1e-4)


def test_input_positions_untouched():
    arrays = trio_arrays()
    refine_positions(arrays)
    assert list(arrays.pos[1]) == [0, 0]


def test_rows_keep_unit_spacing_within_width():
    # couple with three children
    arrays = AlignmentArrays.empty(2, 3)
    arrays.nid[0, :2] = [0, 1]
    arrays.pos[0, :2] = [0, 1]
    arrays.spouse[0, 0] = True
    arrays.n[0] = 2
    arrays.nid[1] = [2, 3, 4]
    arrays.pos[1] = [0, 1, 2]
    arrays.fam[1] = [1, 1, 1]
    arrays.n[1] = 3

    pos = refine_positions(arrays, width=4)
    assert (np.diff(pos[1]) >= 1 - 1e-4).all()
    assert pos[1].min() >= -1e-4
    assert pos[1].max() <= 3 + 1e-4
    # children centered under the couple
    assert pos[1].mean() == pytest.approx(pos[0, :2].mean(), abs=1e-3)


def test_missing_spouse_is_a_bug():
    arrays = AlignmentArrays.empty(1, 1)
    arrays.nid[0, 0] = 0
    arrays.spouse[0, 0] = True
    arrays.n[0] = 1
    with pytest.raises(AlignmentBugError):
        refine_positions(arrays)


def test_family_beyond_parent_row_is_a_bug():
    arrays = trio_arrays()
    arrays.fam[1, 0] = 2
    with pytest.raises(AlignmentBugError):
        refine_positions(arrays)
