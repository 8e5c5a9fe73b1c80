# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

import logging, time
import numpy as np
from .arrays import EMPTY, SpouseEntry, dedupe_spouses
from .depth import generation_depth
from .errors import HintError, NoFoundersError
from .hints import auto_hints, check_hints, default_hints
from .merge import merge_subtrees
from .pedigree import SPOUSE
from .refine import refine_positions
from .subtree import align_subtree
logger = logging.getLogger("genolayout")


class PedigreeLayout(object):
    def __init__(self, nid, pos, fam, spouse, twins, n, pedigree=None):
        """
        PedigreeLayout - final grid layout of a pedigree

        All matrices are indexed [level][column]; the occupied cells of a
        level are columns 0 to n[level]-1.

        :param nid: Individual index per cell, -1 when unoccupied
        :type nid: numpy.ndarray
        :param pos: Horizontal position per cell
        :type pos: numpy.ndarray
        :param fam: 0, or f when the parents sit at columns f-1 and f of the level above
        :type fam: numpy.ndarray
        :param spouse: 1 when a cell and its right neighbour are spouses, 2 when also related
        :type spouse: numpy.ndarray
        :param twins: Twin code at the leftmost cell of each twin pair, 0 otherwise
        :type twins: numpy.ndarray
        :param n: Occupied column count per level
        :type n: numpy.ndarray
        :param pedigree: Pedigree that was laid out
        :type pedigree: Pedigree
        """
        self.nid = nid
        self.pos = pos
        self.fam = fam
        self.spouse = spouse
        self.twins = twins
        self.n = n
        self.pedigree = pedigree

    @property
    def levels(self):
        return self.nid.shape[0]

    def row(self, level):
        """Returns individual indices occupying the specified level"""
        return [int(i) for i in self.nid[level, :self.n[level]]]

    def positions(self, spacing=1.0, row_height=1.0):
        """
        Returns a dict mapping each individual's identity to an (x, y) tuple

        Individuals plotted more than once are reported at their first
        appearance, scanning levels top to bottom and columns left to right.
        Coordinates are shifted so that the smallest x is 0.

        :param spacing: Horizontal distance per unit of position
        :type spacing: float
        :param row_height: Vertical distance between levels
        :type row_height: float
        """
        occupied = [self.pos[lev, :self.n[lev]] for lev in range(self.levels) if self.n[lev] > 0]
        xmin = min(float(row.min()) for row in occupied) if len(occupied) > 0 else 0.0
        coords = {}
        for lev in range(self.levels):
            for col in range(self.n[lev]):
                i = int(self.nid[lev, col])
                key = self.pedigree.ids[i] if self.pedigree is not None else i
                if key in coords:
                    continue
                coords[key] = ((float(self.pos[lev, col]) - xmin)*spacing, lev*row_height)
        return coords

    def to_dict(self):
        """Returns the layout matrices as plain nested lists"""
        return {
            "n": [int(v) for v in self.n],
            "nid": self.nid.tolist(),
            "pos": self.pos.tolist(),
            "fam": self.fam.tolist(),
            "spouse": self.spouse.tolist(),
            "twins": self.twins.tolist(),
        }

    def __repr__(self):
        return "PedigreeLayout(levels={0}, n={1})".format(self.levels, list(self.n))


class PedigreeAligner(object):
    def __init__(self, pedigree, hints=None, packed=True, width=10, align=True, child_penalty=1.5, spouse_penalty=2):
        """
        PedigreeAligner - computes the layout of a pedigree

        :param pedigree: Pedigree to lay out
        :type pedigree: Pedigree
        :param hints: Ordering and spouse hints, computed automatically when omitted
        :type hints: Hints
        :param packed: Whether to pack individuals onto integer columns before refinement
        :type packed: bool
        :param width: Preferred maximum width of the plot
        :type width: float
        :param align: Whether to refine positions with the quadratic program
        :type align: bool
        :param child_penalty: Exponent weighting how strongly children are centered under parents
        :type child_penalty: float
        :param spouse_penalty: Weight keeping spouses next to each other
        :type spouse_penalty: float
        """
        self.pedigree = pedigree
        self.hints = hints
        self.packed = packed
        self.width = width
        self.align = align
        self.child_penalty = child_penalty
        self.spouse_penalty = spouse_penalty

    def layout(self):
        """Returns the PedigreeLayout of the pedigree"""
        start = time.time()
        self.pedigree.validate()
        hints = self._prepare_hints()
        result = self._align(hints, self.align)
        logger.info("Pedigree layout of %i individuals took %.4fs", len(self.pedigree), time.time()-start)
        return result

    def _prepare_hints(self):
        n = len(self.pedigree)
        if self.hints is not None:
            try:
                return check_hints(self.hints, self.pedigree.sex)
            except HintError as e:
                logger.warning("Invalid hints supplied, computing them automatically: %s", e)

        try:
            return auto_hints(self.pedigree, self._hinted_layout, seed=self.pedigree.birth_order())
        except Exception as e:
            logger.warning("Automatic hints failed, using plain ordering: %s", e)
            return default_hints(n)

    def _hinted_layout(self, hints):
        # intermediate orders may be negative until auto_hints re-ranks them
        return self._align(hints, align=False)

    def _align(self, hints, align):
        ped = self.pedigree
        father = ped.father
        mother = ped.mother
        level = generation_depth(father, mother, align=True)
        order = hints.order

        spouselist = self._spouse_list(hints)
        founders = self._founders(spouselist, order)
        logger.debug("Founders in plotting order: %s", founders)

        arrays = align_subtree(founders[0], father, mother, level, order, spouselist, self.packed)
        for founder in founders[1:]:
            other = align_subtree(founder, father, mother, level, order, arrays.spouselist, self.packed)
            arrays = merge_subtrees(arrays, other, self.packed)

        spouse = self._consanguinity(arrays)
        twins = self._twins(arrays)

        if align and max(level) > 0:
            pos = refine_positions(arrays, width=self.width, child_penalty=self.child_penalty,
                                   spouse_penalty=self.spouse_penalty)
        else:
            pos = arrays.pos.copy()

        return PedigreeLayout(nid=arrays.nid.copy(), pos=pos, fam=arrays.fam.copy(), spouse=spouse,
                              twins=twins, n=arrays.n.copy(), pedigree=ped)

    def _spouse_list(self, hints):
        ped = self.pedigree
        spouselist = []
        for hint in hints.spouse:
            if ped.sex[hint.left] == "male":
                spouselist.append(SpouseEntry(hint.left, hint.right, 1, hint.anchor))
            else:
                spouselist.append(SpouseEntry(hint.right, hint.left, 2, hint.anchor))

        for rel in ped.relation:
            if rel.code == SPOUSE:
                if ped.sex[rel.id1] == "male":
                    spouselist.append(SpouseEntry(rel.id1, rel.id2, 0, 0))
                else:
                    spouselist.append(SpouseEntry(rel.id2, rel.id1, 0, 0))

        for i in range(len(ped)):
            if ped.father[i] >= 0 and ped.mother[i] >= 0:
                spouselist.append(SpouseEntry(ped.father[i], ped.mother[i], 0, 0))

        return dedupe_spouses(spouselist, len(ped))

    def _founders(self, spouselist, order):
        """Returns individuals that start a subtree, sorted by hint order"""
        ped = self.pedigree
        couples = [entry for entry in spouselist if ped.is_founder(entry.left) and ped.is_founder(entry.right)]

        dupmom = _repeated([entry.right for entry in couples])
        dupdad = _repeated([entry.left for entry in couples])
        dups = set(dupmom) | set(dupdad)
        foundmom = [entry.right for entry in couples if entry.left not in dups and entry.right not in dups]

        partnered = set(i for entry in spouselist for i in (entry.left, entry.right))
        isolated = [i for i in range(len(ped)) if ped.is_founder(i) and i not in partnered]

        founders = []
        for i in dupmom + dupdad + foundmom + isolated:
            if i not in founders:
                founders.append(i)
        if len(founders) == 0:
            logger.critical("No founders found in pedigree %s", ped.name)
            raise NoFoundersError("No founders found in pedigree")
        return sorted(founders, key=lambda i: order[i])

    def _consanguinity(self, arrays):
        spouse = arrays.spouse.astype(int)
        for lev, col in zip(*np.nonzero(arrays.spouse)):
            left = int(arrays.nid[lev, col])
            right = int(arrays.nid[lev, col+1])
            if self.pedigree.is_consanguineous(left, right):
                logger.debug("Spouses %i and %i share an ancestor", left, right)
                spouse[lev, col] = 2
        return spouse

    def _twins(self, arrays):
        twins = np.zeros(arrays.nid.shape, dtype=int)
        # only cells connected to parents take part
        connected = np.where(arrays.fam > 0, arrays.nid, EMPTY)
        flat = connected.ravel()
        for rel in self.pedigree.relation:
            if rel.code >= SPOUSE:
                continue
            lpos = np.flatnonzero(flat == rel.id1)
            rpos = np.flatnonzero(flat == rel.id2)
            if len(lpos) == 0 or len(rpos) == 0:
                continue
            lev, col = np.unravel_index(min(lpos[0], rpos[0]), connected.shape)
            twins[lev, col] = rel.code
        return twins


def _repeated(values):
    seen = set()
    repeated = []
    for v in values:
        if v in seen and v not in repeated:
            repeated.append(v)
        seen.add(v)
    return repeated


def align_pedigree(pedigree, hints=None, **kwargs):
    """
    Returns the PedigreeLayout of the supplied pedigree

    :param pedigree: Pedigree to lay out
    :type pedigree: Pedigree
    :param hints: Ordering and spouse hints, computed automatically when omitted
    :type hints: Hints
    :param kwargs: Configuration passed to PedigreeAligner
    """
    return PedigreeAligner(pedigree, hints=hints, **kwargs).layout()
