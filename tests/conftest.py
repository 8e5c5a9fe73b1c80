import pytest

from genolayout import Pedigree


@pytest.fixture()
def trio():
    # father, mother and their child
    return Pedigree(ids=["dad", "mom", "kid"],
                    sex=["male", "female", "female"],
                    father=[-1, -1, 0],
                    mother=[-1, -1, 1])


@pytest.fixture()
def single():
    return Pedigree(ids=["ego"], sex=["unknown"], father=[-1], mother=[-1])


@pytest.fixture()
def cousins():
    # second cousins 10 and 11 marry; both descend from founders 0 and 1
    return Pedigree(ids=list(range(13)),
                    sex=["male", "female", "male", "female", "female", "male", "male",
                         "female", "female", "male", "male", "female", "male"],
                    father=[-1, -1, 0, 0, -1, -1, 2, 5, -1, -1, 6, 9, 10],
                    mother=[-1, -1, 1, 1, -1, -1, 4, 3, -1, -1, 8, 7, 11])


@pytest.fixture()
def three_generations():
    # grandparents, their two children with spouses, and one grandchild each
    return Pedigree(ids=["gf", "gm", "son", "dil", "dau", "sil", "g1", "g2"],
                    sex=["male", "female", "male", "female", "female", "male", "female", "male"],
                    father=[-1, -1, 0, -1, 0, -1, 2, 5],
                    mother=[-1, -1, 1, -1, 1, -1, 3, 4])
