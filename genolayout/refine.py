# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

import logging, math, time
import numpy as np
from .errors import AlignmentBugError
from .quadprog import solve_qp
logger = logging.getLogger("genolayout")

ANCHOR_PENALTY = 1e-5
RIDGE = 1e-8


def refine_positions(arrays, width=10, child_penalty=1.5, spouse_penalty=2):
    """
    Returns final horizontal positions for every cell of the aligned pedigree

    Positions are chosen by a quadratic program that pulls spouses together
    and children towards the midpoint of their parents, while keeping each
    row ordered with a spacing of at least 1 and within [0, width-1].

    :param arrays: Merged alignment of the whole pedigree
    :type arrays: AlignmentArrays
    :param width: Preferred maximum width of the plot
    :type width: float
    :param child_penalty: Exponent k^-child_penalty weighting a family of k children
    :type child_penalty: float
    :param spouse_penalty: Weight keeping spouses next to each other
    :type spouse_penalty: float
    """
    start = time.time()
    maxlev = arrays.levels
    n = arrays.n
    width = max(width, n.max() + 0.01)
    total = int(n.sum())

    # number the plotting points sequentially
    myid = np.full(arrays.nid.shape, -1, dtype=int)
    offset = 0
    for lev in range(maxlev):
        myid[lev, :n[lev]] = offset + np.arange(n[lev])
        offset += n[lev]

    penalties = []

    weight = math.sqrt(spouse_penalty)
    for lev in range(maxlev):
        for col in np.flatnonzero(arrays.spouse[lev, :n[lev]]):
            if col+1 >= n[lev]:
                raise AlignmentBugError("Spouse boundary at level {0} column {1} has no right partner".format(lev, col))
            row = np.zeros(total)
            row[myid[lev, col]] = weight
            row[myid[lev, col+1]] = -weight
            penalties.append(row)

    for lev in range(1, maxlev):
        fams = arrays.fam[lev, :n[lev]]
        families = []
        for f in fams:
            if f > 0 and f not in families:
                families.append(f)
        for f in families:
            if f >= n[lev-1]:
                raise AlignmentBugError("Family {0} at level {1} points past the parents' row".format(f, lev))
            who = np.flatnonzero(fams == f)
            penalty = math.sqrt(len(who)**(-child_penalty))
            for col in who:
                row = np.zeros(total)
                row[myid[lev, col]] = -penalty
                row[myid[lev-1, f-1]] += penalty/2
                row[myid[lev-1, f]] += penalty/2
                penalties.append(row)

    # pin one point of the widest row to remove the translation freedom
    anchor = np.zeros(total)
    anchor[myid[int(np.argmax(n)), 0]] = ANCHOR_PENALTY
    penalties.append(anchor)
    pmat = np.vstack(penalties)

    constraints = []
    bounds = []
    for lev in range(maxlev):
        nn = n[lev]
        if nn == 0:
            continue
        for i in range(nn-1):
            row = np.zeros(total)
            row[myid[lev, i]] = -1
            row[myid[lev, i+1]] = 1
            constraints.append(row)
            bounds.append(1.0)
        row = np.zeros(total)
        row[myid[lev, 0]] = 1
        constraints.append(row)
        bounds.append(0.0)
        row = np.zeros(total)
        row[myid[lev, nn-1]] = -1
        constraints.append(row)
        bounds.append(1.0 - width)
    cmat = np.vstack(constraints)

    hessian = pmat.T.dot(pmat) + RIDGE*np.eye(total)
    logger.debug("Refining %i positions with %i penalties and %i constraints", total, len(penalties), len(bounds))
    solution = solve_qp(hessian, np.zeros(total), cmat.T, np.array(bounds))

    pos = arrays.pos.copy()
    occupied = myid >= 0
    pos[occupied] = solution[myid[occupied]]
    logger.info("Position refinement took %.4fs", time.time()-start)
    return pos
