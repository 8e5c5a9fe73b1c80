# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

import logging
from collections import namedtuple
import numpy as np
from .errors import AlignmentBugError
logger = logging.getLogger("genolayout")

EMPTY = -1

# left is the male partner where sex is known; side 1 plots left to the
# left of right, side 2 the other way round, 0 is undecided
SpouseEntry = namedtuple("SpouseEntry", ["left", "right", "side", "anchor"])


def dedupe_spouses(spouselist, n=None):
    """Returns spouse entries without repeated (left, right) pairs, first entry wins

    :param spouselist: Spouse entries
    :type spouselist: list
    :param n: Number of individuals in pedigree, defaults to one past the largest index listed
    :type n: int
    """
    if n is None:
        n = 1 + max([max(entry.left, entry.right) for entry in spouselist], default=0)
    seen = set()
    unique = []
    for entry in spouselist:
        key = entry.left*n + entry.right
        if key in seen:
            continue
        seen.add(key)
        unique.append(entry)
    return tuple(unique)


class AlignmentArrays(object):
    def __init__(self, nid, pos, fam, spouse, n, spouselist=()):
        """
        AlignmentArrays - grid layout of a (partial) pedigree

        All matrices are indexed [level][column]; the occupied cells of a
        level are columns 0 to n[level]-1.

        :param nid: Individual index per cell, EMPTY when unoccupied
        :type nid: numpy.ndarray
        :param pos: Provisional horizontal position per cell
        :type pos: numpy.ndarray
        :param fam: 0, or f when the parents sit at columns f-1 and f of the level above
        :type fam: numpy.ndarray
        :param spouse: Whether a cell and its right neighbour are spouses
        :type spouse: numpy.ndarray
        :param n: Occupied column count per level
        :type n: numpy.ndarray
        :param spouselist: Spouse entries not yet placed
        :type spouselist: tuple
        """
        self.nid = nid
        self.pos = pos
        self.fam = fam
        self.spouse = spouse
        self.n = n
        self.spouselist = tuple(spouselist)
        self._check()

    def _check(self):
        shape = self.nid.shape
        if len(shape) != 2:
            raise AlignmentBugError("Alignment matrices must be two dimensional, got shape {0}".format(shape))
        for field in ("pos", "fam", "spouse"):
            if getattr(self, field).shape != shape:
                raise AlignmentBugError("Alignment matrix {0} has shape {1}, expected {2}".format(field, getattr(self, field).shape, shape))
        if self.n.shape != (shape[0],):
            raise AlignmentBugError("Occupied counts have shape {0} for {1} levels".format(self.n.shape, shape[0]))
        if len(self.n) > 0 and (self.n.min() < 0 or self.n.max() > shape[1]):
            raise AlignmentBugError("Occupied counts {0} exceed {1} columns".format(list(self.n), shape[1]))

    @classmethod
    def empty(cls, levels, columns, spouselist=()):
        """Returns empty arrays with the specified number of levels and columns"""
        return cls(nid=np.full((levels, columns), EMPTY, dtype=int),
                   pos=np.zeros((levels, columns), dtype=float),
                   fam=np.zeros((levels, columns), dtype=int),
                   spouse=np.zeros((levels, columns), dtype=bool),
                   n=np.zeros(levels, dtype=int),
                   spouselist=spouselist)

    @property
    def levels(self):
        return self.nid.shape[0]

    @property
    def columns(self):
        return self.nid.shape[1]

    def row(self, level):
        """Returns individual indices occupying the specified level"""
        return [int(i) for i in self.nid[level, :self.n[level]]]

    def copy(self):
        return AlignmentArrays(self.nid.copy(), self.pos.copy(), self.fam.copy(),
                               self.spouse.copy(), self.n.copy(), self.spouselist)

    def trimmed(self):
        """Returns arrays whose width matches the longest level"""
        width = int(self.n.max()) if len(self.n) > 0 else 0
        if width >= self.columns:
            return self
        return AlignmentArrays(self.nid[:, :width].copy(), self.pos[:, :width].copy(),
                               self.fam[:, :width].copy(), self.spouse[:, :width].copy(),
                               self.n.copy(), self.spouselist)

    def __repr__(self):
        return "AlignmentArrays(levels={0}, columns={1}, n={2})".format(self.levels, self.columns, list(self.n))
