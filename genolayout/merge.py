# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

import logging
import numpy as np
from .arrays import AlignmentArrays, dedupe_spouses
from .errors import AlignmentBugError
logger = logging.getLogger("genolayout")


def merge_subtrees(left, right, packed=True, space=1):
    """
    Returns the layout of two subtrees placed side by side

    Each level of the right subtree is appended to the same level of the
    left one. When the last individual of a left level is the first of the
    right level (a person reached through two lines of descent) the two
    cells are merged into one.

    :param left: Left subtree
    :type left: AlignmentArrays
    :param right: Right subtree
    :type right: AlignmentArrays
    :param packed: Whether positions are plain column numbers
    :type packed: bool
    :param space: Minimum gap between distinct neighbours when not packed
    :type space: float
    """
    if left.levels != right.levels:
        raise AlignmentBugError("Cannot merge subtrees with {0} and {1} levels".format(left.levels, right.levels))

    maxlev = left.levels
    n1 = left.n
    n2 = right.n
    n = n1 + n2
    width = max(int(n.max()), left.columns)

    merged = AlignmentArrays.empty(maxlev, width, dedupe_spouses(right.spouselist))
    merged.nid[:, :left.columns] = left.nid
    merged.pos[:, :left.columns] = left.pos
    merged.fam[:, :left.columns] = left.fam
    merged.spouse[:, :left.columns] = left.spouse
    fam2 = right.fam.copy()

    slide = 0
    if not packed:
        for i in range(maxlev):
            a, b = n1[i], n2[i]
            if a > 0 and b > 0:
                if merged.nid[i, a-1] == right.nid[i, 0]:
                    temp = merged.pos[i, a-1] - right.pos[i, 0]
                else:
                    temp = space + merged.pos[i, a-1] - right.pos[i, 0]
                if temp > slide:
                    slide = temp

    for i in range(maxlev):
        a, b = n1[i], n2[i]
        if b == 0:
            continue

        overlap = 0
        if a > 0 and merged.nid[i, a-1] == right.nid[i, 0]:
            overlap = 1
            logger.debug("Merging duplicate cell for individual %i at level %i", right.nid[i, 0], i)
            merged.fam[i, a-1] = max(merged.fam[i, a-1], fam2[i, 0])
            merged.spouse[i, a-1] = merged.spouse[i, a-1] or right.spouse[i, 0]
            if not packed and fam2[i, 0] > 0:
                if merged.fam[i, a-1] > 0:
                    merged.pos[i, a-1] = (right.pos[i, 0] + merged.pos[i, a-1] + slide)/2
                else:
                    merged.pos[i, a-1] = right.pos[i, 0] + slide
            n[i] -= 1

        if i < maxlev-1:
            # the right subtree's children now find their parents further right
            kids = fam2[i+1] > 0
            fam2[i+1, kids] += a - overlap

        dest = slice(a, a + b - overlap)
        merged.nid[i, dest] = right.nid[i, overlap:b]
        merged.fam[i, dest] = fam2[i, overlap:b]
        merged.spouse[i, dest] = right.spouse[i, overlap:b]
        if packed:
            merged.pos[i, dest] = np.arange(a, a + b - overlap)
        else:
            merged.pos[i, dest] = right.pos[i, overlap:b] + slide

    merged.n = n
    return merged.trimmed()
