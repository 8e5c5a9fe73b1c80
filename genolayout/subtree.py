# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

import logging
import numpy as np
from .arrays import AlignmentArrays
from .merge import merge_subtrees
logger = logging.getLogger("genolayout")


def align_subtree(x, father, mother, level, order, spouselist, packed=True):
    """
    Lays out individual x, x's spouses and all of their descendants

    Spouse entries placed along the way are consumed; the entries still
    unplaced are returned in the spouselist of the result.

    :param x: Index of the individual at the top of the subtree
    :type x: int
    :param father: Index of each individual's father, or -1
    :type father: list
    :param mother: Index of each individual's mother, or -1
    :type mother: list
    :param level: Generation depth of each individual
    :type level: list
    :param order: Preferred left-to-right rank of each individual
    :type order: list
    :param spouselist: Spouse entries not yet placed
    :type spouselist: tuple
    :param packed: Whether positions are plain column numbers
    :type packed: bool
    """
    maxlev = max(level) + 1
    lev = level[x]
    spouselist = tuple(spouselist)

    spouses, rows, sex = _claim_spouses(x, spouselist)
    # marriages that cross levels are plotted at the lower generation
    keep = [k for k, s in enumerate(spouses) if level[s] <= lev]
    spouses = [spouses[k] for k in keep]
    rows = [rows[k] for k in keep]
    nspouse = len(spouses)

    arrays = AlignmentArrays.empty(maxlev, nspouse+1, spouselist)
    arrays.n[lev] = nspouse + 1
    arrays.pos[lev, :] = np.arange(nspouse+1)
    if nspouse == 0:
        arrays.nid[lev, 0] = x
        return arrays

    lspouse, rspouse = _split_spouses(spouses, rows, sex, spouselist)
    arrays.nid[lev, :] = lspouse + [x] + rspouse
    arrays.spouse[lev, :nspouse] = True
    logger.debug("Level %i row for %i: %s", lev, x, lspouse + [x] + rspouse)

    claimed = set(rows)
    remaining = tuple(entry for k, entry in enumerate(spouselist) if k not in claimed)

    result = None
    for i, partner in enumerate(lspouse + rspouse):
        children = [j for j in range(len(father))
                    if (father[j] == x and mother[j] == partner) or (father[j] == partner and mother[j] == x)]
        if len(children) == 0:
            continue

        kids = align_sibship(children, father, mother, level, order, remaining, packed)
        remaining = kids.spouselist

        if lev+1 < maxlev:
            cols = [j for j in range(kids.n[lev+1]) if kids.nid[lev+1, j] in children]
            kids.fam[lev+1, cols] = i + 1
            if not packed and len(cols) > 0:
                _center_children(arrays, kids, lev, i, cols)

        if result is None:
            result = kids
        else:
            result = merge_subtrees(result, kids, packed)

    if result is None:
        arrays.spouselist = remaining
        return arrays

    if result.columns >= nspouse+1:
        # the children's arrays have room for the parents
        result.n[lev] = nspouse + 1
        result.nid[lev, :nspouse+1] = arrays.nid[lev]
        result.pos[lev, :nspouse+1] = arrays.pos[lev]
        result.spouse[lev, :nspouse+1] = arrays.spouse[lev]
    else:
        cols = result.columns
        arrays.n[lev+1:] = result.n[lev+1:]
        arrays.nid[lev+1:, :cols] = result.nid[lev+1:]
        arrays.pos[lev+1:, :cols] = result.pos[lev+1:]
        arrays.fam[lev+1:, :cols] = result.fam[lev+1:]
        arrays.spouse[lev+1:, :cols] = result.spouse[lev+1:]
        result = arrays

    result.spouselist = remaining
    return result


def align_sibship(children, father, mother, level, order, spouselist, packed=True):
    """
    Lays out a set of siblings and their descendants, ordered by hint rank

    A sibling without spouses who already appears on its level through an
    earlier sibling's marriage is not added a second time.
    """
    children = sorted(children, key=lambda c: order[c])
    result = align_subtree(children[0], father, mother, level, order, spouselist, packed)
    remaining = result.spouselist

    mylev = level[children[0]]
    for child in children[1:]:
        sub = align_subtree(child, father, mother, level, order, remaining, packed)
        remaining = sub.spouselist
        if sub.n[mylev] > 1 or child not in result.row(mylev):
            result = merge_subtrees(result, sub, packed)

    result.spouselist = remaining
    return result


def _claim_spouses(x, spouselist):
    spouses = []
    rows = []
    if len(spouselist) == 0:
        return spouses, rows, 1

    if any(entry.left == x for entry in spouselist):
        sex = 1
        for k, entry in enumerate(spouselist):
            if entry.left == x and (entry.anchor == entry.side or entry.anchor == 0):
                spouses.append(entry.right)
                rows.append(k)
    else:
        sex = 2
        for k, entry in enumerate(spouselist):
            if entry.right == x and (entry.anchor != entry.side or entry.anchor == 0):
                spouses.append(entry.left)
                rows.append(k)
    return spouses, rows, sex


def _split_spouses(spouses, rows, sex, spouselist):
    lspouse = []
    rspouse = []
    undecided = []
    for k, row in enumerate(rows):
        side = spouselist[row].side
        if side == 3 - sex:
            lspouse.append(spouses[k])
        elif side == sex:
            rspouse.append(spouses[k])
        else:
            undecided.append(k)

    if len(undecided) > 0:
        nleft = (len(rows) + (1 if sex == 2 else 0))//2 - len(lspouse)
        if nleft > 0:
            lspouse.extend(spouses[k] for k in undecided[:nleft])
            undecided = undecided[nleft:]
        rspouse = [spouses[k] for k in undecided] + rspouse
    return lspouse, rspouse


def _center_children(arrays, kids, lev, i, cols):
    kidmean = kids.pos[lev+1, cols].mean()
    parmean = arrays.pos[lev, i:i+2].mean()
    if kidmean > parmean:
        # kids to the right of their parents: move the parents
        arrays.pos[lev, i:] += kidmean - parmean
    else:
        shift = parmean - kidmean
        for j in range(lev+1, kids.levels):
            kids.pos[j, :kids.n[j]] += shift
