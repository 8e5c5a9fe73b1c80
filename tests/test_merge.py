import numpy as np
import pytest

from genolayout.arrays import AlignmentArrays, SpouseEntry
from genolayout.errors import AlignmentBugError
from genolayout.merge import merge_subtrees


def family(parents, children, spouselist=()):
    """Two-level arrays with a couple and their children"""
    arrays = AlignmentArrays.empty(2, max(len(parents), len(children)), spouselist)
    arrays.nid[0, :len(parents)] = parents
    arrays.pos[0, :len(parents)] = np.arange(len(parents))
    arrays.spouse[0, 0] = len(parents) > 1
    arrays.n[0] = len(parents)
    arrays.nid[1, :len(children)] = children
    arrays.pos[1, :len(children)] = np.arange(len(children))
    arrays.fam[1, :len(children)] = 1 if len(parents) > 1 else 0
    arrays.n[1] = len(children)
    return arrays


def test_side_by_side():
    merged = merge_subtrees(family([0, 1], [2]), family([3, 4], [5, 6]))
    assert merged.row(0) == [0, 1, 3, 4]
    assert merged.row(1) == [2, 5, 6]
    assert list(merged.pos[0]) == [0, 1, 2, 3]
    assert list(merged.pos[1, :3]) == [0, 1, 2]
    # the right family's children now point at columns 2 and 3
    assert list(merged.fam[1, :3]) == [1, 3, 3]
    assert list(merged.spouse[0]) == [True, False, True, False]


def test_shared_individual_overlaps():
    merged = merge_subtrees(family([0, 1], [2]), family([1, 3], [4]))
    assert merged.row(0) == [0, 1, 3]
    assert list(merged.n) == [3, 2]
    assert list(merged.spouse[0]) == [True, True, False]
    assert list(merged.fam[1, :2]) == [1, 2]


def test_empty_right_level():
    right = AlignmentArrays.empty(2, 1)
    right.nid[1, 0] = 7
    right.n[1] = 1
    merged = merge_subtrees(family([0, 1], [2]), right)
    assert merged.row(0) == [0, 1]
    assert merged.row(1) == [2, 7]


def test_unpacked_slide():
    left = family([0, 1], [2])
    left.pos[1, 0] = 0.5
    right = family([3, 4], [5])
    right.pos[1, 0] = 0.5
    merged = merge_subtrees(left, right, packed=False)
    assert list(merged.pos[0]) == [0, 1, 2, 3]
    assert merged.pos[1, 1] == pytest.approx(2.5)


def test_spouselist_comes_from_right_subtree():
    left = family([0, 1], [2], [SpouseEntry(5, 6, 0, 0)])
    right = family([3, 4], [5], [SpouseEntry(7, 8, 0, 0), SpouseEntry(7, 8, 1, 0)])
    merged = merge_subtrees(left, right)
    assert merged.spouselist == (SpouseEntry(7, 8, 0, 0),)


def test_level_mismatch_is_a_bug():
    with pytest.raises(AlignmentBugError):
        merge_subtrees(family([0, 1], [2]), AlignmentArrays.empty(3, 1))
