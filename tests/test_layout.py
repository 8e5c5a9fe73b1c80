import numpy as np
import pytest

from genolayout import Hints, Pedigree, PedigreeAligner, align_pedigree, generation_depth
from genolayout.errors import CyclicPedigreeError, MalformedPedigreeError


def assert_rows_spaced(layout):
    for lev in range(layout.levels):
        row = layout.pos[lev, :layout.n[lev]]
        assert (np.diff(row) >= 1 - 1e-4).all()


def test_single_individual(single):
    layout = align_pedigree(single)
    assert layout.nid.tolist() == [[0]]
    assert layout.pos.tolist() == [[0.0]]
    assert list(layout.n) == [1]
    assert layout.spouse.tolist() == [[0]]


def test_trio(trio):
    layout = align_pedigree(trio)
    assert layout.row(0) == [0, 1]
    assert layout.row(1) == [2]
    assert layout.spouse[0, 0] == 1
    assert layout.fam[1, 0] == 1
    assert layout.pos[0, :2] == pytest.approx([0, 1], abs=1e-4)
    assert layout.pos[1, 0] == pytest.approx(0.5, abs=1e-4)


def test_unpacked_without_refinement(trio):
    packed = align_pedigree(trio, align=False)
    assert packed.pos[1, 0] == 0
    unpacked = align_pedigree(trio, packed=False, align=False)
    assert unpacked.pos[1, 0] == pytest.approx(0.5)


def test_consanguineous_marriage(cousins):
    layout = align_pedigree(cousins)
    assert layout.row(3) == [10, 11]
    assert layout.spouse[3, 0] == 2
    # the first generation couple is not related
    assert layout.row(0) == [0, 1]
    assert layout.spouse[0, 0] == 1


def test_structure_of_larger_pedigree(three_generations):
    ped = three_generations
    layout = align_pedigree(ped)
    depth = generation_depth(ped.father, ped.mother, align=True)
    assert_rows_spaced(layout)
    for lev in range(layout.levels):
        for i in layout.row(lev):
            assert depth[i] == lev
    # each marked spouse boundary joins two occupied cells
    for lev, col in zip(*np.nonzero(layout.spouse)):
        assert col + 1 < layout.n[lev]
    assert sorted(set(i for lev in range(layout.levels) for i in layout.row(lev))) == list(range(len(ped)))


def test_layout_is_deterministic(cousins):
    first = align_pedigree(cousins).to_dict()
    second = align_pedigree(cousins).to_dict()
    assert first == second


def test_twins_marked():
    ped = Pedigree(ids=list(range(4)),
                   sex=["male", "female", "female", "female"],
                   father=[-1, -1, 0, 0],
                   mother=[-1, -1, 1, 1],
                   relation=[(2, 3, 1)])
    layout = align_pedigree(ped)
    assert layout.row(1) == [2, 3]
    assert layout.twins[1, 0] == 1
    assert layout.twins.sum() == 1


def test_twins_matrix_without_twins(trio):
    layout = align_pedigree(trio)
    assert layout.twins.shape == layout.nid.shape
    assert not layout.twins.any()


def test_one_parent_rejected():
    ped = Pedigree(ids=["a", "b", "c"], sex=["male", "female", "male"], father=[-1, -1, 0], mother=[-1, -1, -1])
    with pytest.raises(MalformedPedigreeError):
        align_pedigree(ped)


def test_cycle_rejected():
    ped = Pedigree(ids=["a", "b"], sex=["male", "male"], father=[1, 0], mother=[-1, -1])
    with pytest.raises(CyclicPedigreeError):
        align_pedigree(ped)


def test_invalid_hints_fall_back(trio):
    expected = align_pedigree(trio).to_dict()
    layout = align_pedigree(trio, hints=Hints(order=[1, 2]))
    assert layout.to_dict() == expected


def test_failing_auto_hints_fall_back(trio, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("boom")
    monkeypatch.setattr("genolayout.layout.auto_hints", broken)
    layout = align_pedigree(trio)
    assert layout.row(0) == [0, 1]
    assert layout.row(1) == [2]


def test_input_not_modified(trio):
    father = trio.father
    hints = Hints(order=[1, 2, 1])
    align_pedigree(trio, hints=hints)
    assert trio.father == father
    assert hints.order == (1, 2, 1)


def test_positions(trio):
    coords = align_pedigree(trio).positions(spacing=2.0, row_height=3.0)
    assert set(coords) == {"dad", "mom", "kid"}
    assert coords["dad"] == pytest.approx((0, 0), abs=1e-3)
    assert coords["mom"] == pytest.approx((2, 0), abs=1e-3)
    assert coords["kid"] == pytest.approx((1, 3), abs=1e-3)


def test_to_dict(trio):
    data = align_pedigree(trio).to_dict()
    assert set(data) == {"n", "nid", "pos", "fam", "spouse", "twins"}
    assert data["n"] == [2, 1]
    assert data["nid"] == [[0, 1], [2, -1]]


def test_configuration_passed_through(three_generations):
    aligner = PedigreeAligner(three_generations, width=20, child_penalty=2, spouse_penalty=4)
    layout = aligner.layout()
    assert layout.pos.max() <= 19 + 1e-4
    assert_rows_spaced(layout)
