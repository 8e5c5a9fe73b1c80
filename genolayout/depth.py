# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

import logging
from .errors import AlignmentBugError, CyclicPedigreeError
from .utils import ancestor_closure, parent_graph
logger = logging.getLogger("genolayout")


def generation_depth(father, mother, align=False):
    """
    Returns the generation depth of each individual, 0 for founders

    Depth is the number of generations to the farthest founder ancestor.
    With align, depths are adjusted so that spouses are plotted on the
    same row wherever this does not conflict with their ancestry.

    :param father: Index of each individual's father, or -1
    :type father: list
    :param mother: Index of each individual's mother, or -1
    :type mother: list
    :param align: Whether to move spouses onto the same generation
    :type align: bool
    """
    n = len(father)
    if n == 1:
        return [0]

    parents = set(i for i in range(n) if father[i] < 0 and mother[i] < 0)
    depth = [0]*n

    for i in range(1, n+1):
        children = [j for j in range(n) if mother[j] in parents or father[j] in parents]
        if len(children) == 0:
            break
        if i == n:
            logger.critical("Depth assignment did not terminate after %i generations", n)
            raise CyclicPedigreeError("Impossible pedigree: someone is their own ancestor")
        for j in children:
            depth[j] = i
        parents = set(children)

    if not align:
        return depth

    _align_spouses(depth, father, mother)

    if all(d > 0 for d in depth):
        raise AlignmentBugError("Bug in depth alignment: no individual left at depth 0")
    misplaced = [i for i in range(n) if depth[i] == 0 and (father[i] >= 0 or mother[i] >= 0)]
    if len(misplaced) > 0:
        raise AlignmentBugError("Bug in depth alignment: individuals {0} have parents but depth 0".format(misplaced))

    return depth


def _parent_pairs(father, mother):
    n = len(father)
    seen = set()
    pairs = []
    for i in range(n):
        if father[i] >= 0 and mother[i] >= 0:
            key = father[i] + mother[i]*n
            if key not in seen:
                seen.add(key)
                pairs.append((father[i], mother[i]))
    return pairs


def _align_spouses(depth, father, mother):
    pairs = _parent_pairs(father, mother)
    graph = parent_graph(father, mother)
    done = [False]*len(pairs)

    while True:
        todo = [k for k, (dad, mom) in enumerate(pairs) if not done[k] and depth[dad] != depth[mom]]
        if len(todo) == 0:
            break

        who = min(todo, key=lambda k: max(depth[pairs[k][0]], depth[pairs[k][1]]))
        dad, mom = pairs[who]
        # good sits closer to the children, bad gets moved
        if depth[dad] > depth[mom]:
            good, bad = dad, mom
        else:
            good, bad = mom, dad

        abad = ancestor_closure(graph, [bad])
        marriages = sum(1 for d, m in pairs if d == bad) + sum(1 for d, m in pairs if m == bad)

        if len(abad) == 1 and marriages == 1:
            # solitary marry-in
            logger.debug("Moving marry-in %i to depth %i", bad, depth[good])
            depth[bad] = depth[good]
        else:
            agood = _good_closure(good, who, pairs, depth, father, mother, graph)
            if len(abad & agood) == 0:
                shift = depth[good] - depth[bad]
                logger.debug("Shifting ancestors of %i down by %i", bad, shift)
                for i in abad:
                    depth[i] += shift
                _repair(depth, father, mother)
            else:
                logger.debug("Ancestors of %i and %i overlap, not aligning", good, bad)

        for k, (d, m) in enumerate(pairs):
            if d == bad or m == bad:
                done[k] = True

    return depth


def _good_closure(good, who, pairs, depth, father, mother, graph):
    """Ancestors of good, their spouses and ancestors, and children no deeper than good"""
    n = len(father)
    others = [pair for k, pair in enumerate(pairs) if k != who]
    agood = ancestor_closure(graph, [good])

    while True:
        spouses = set(m for d, m in others if d in agood) | set(d for d, m in others if m in agood)
        temp = ancestor_closure(graph, agood | spouses)
        kids = [j for j in range(n) if (mother[j] in temp or father[j] in temp) and depth[j] <= depth[good]]
        temp.update(kids)
        if len(temp) == len(agood):
            return agood
        agood = temp


def _repair(depth, father, mother):
    n = len(father)
    for i in range(n+1):
        current = set(j for j in range(n) if depth[j] == i)
        found = False
        for j in range(n):
            if mother[j] in current or father[j] in current:
                found = True
                depth[j] = max(i+1, depth[j])
        if not found:
            break
