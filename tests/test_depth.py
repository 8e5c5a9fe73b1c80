import pytest

from genolayout import generation_depth
from genolayout.errors import CyclicPedigreeError


def test_founders_are_depth_zero(trio):
    assert generation_depth(trio.father, trio.mother) == [0, 0, 1]


def test_single_individual():
    assert generation_depth([-1], [-1]) == [0]
    assert generation_depth([-1], [-1], align=True) == [0]


def test_depth_counts_longest_line(cousins):
    depth = generation_depth(cousins.father, cousins.mother)
    assert depth == [0, 0, 1, 1, 0, 0, 2, 2, 0, 0, 3, 3, 4]


def test_align_moves_marry_ins_to_spouse_depth(cousins):
    depth = generation_depth(cousins.father, cousins.mother, align=True)
    assert depth == [0, 0, 1, 1, 1, 1, 2, 2, 2, 2, 3, 3, 4]


def test_aligned_children_below_parents(three_generations):
    ped = three_generations
    depth = generation_depth(ped.father, ped.mother, align=True)
    for i in range(len(ped)):
        if ped.father[i] >= 0:
            assert depth[i] > depth[ped.father[i]]
            assert depth[i] > depth[ped.mother[i]]
    # spouses of both children share their row
    assert depth[2] == depth[3]
    assert depth[4] == depth[5]


def test_inputs_are_not_modified(trio):
    father = list(trio.father)
    mother = list(trio.mother)
    generation_depth(father, mother, align=True)
    assert father == list(trio.father)
    assert mother == list(trio.mother)


def test_cycle_is_rejected():
    # 1 and 2 are each other's parent
    father = [-1, 0, 1]
    mother = [-1, 2, 0]
    with pytest.raises(CyclicPedigreeError):
        generation_depth(father, mother)
