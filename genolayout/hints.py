# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

import logging, math, numbers, time
from collections import namedtuple
from .depth import generation_depth
from .errors import HintError
from .pedigree import MONOZYGOTIC, SPOUSE
from .utils import rank
logger = logging.getLogger("genolayout")

# left is plotted to the left of right; anchor 0 lets either partner place the
# couple, 1 and 2 pin it to one of them
SpouseHint = namedtuple("SpouseHint", ["left", "right", "anchor"])


class Hints(object):
    def __init__(self, order, spouse=None):
        """
        Hints - preferred ordering of individuals and pre-declared spouse pairs

        :param order: Preferred left-to-right rank of each individual
        :type order: list
        :param spouse: Spouse pairs as (left, right, anchor) triples
        :type spouse: list
        """
        self.order = tuple(order)
        self.spouse = tuple(SpouseHint(*s) for s in spouse) if spouse else ()

    def __eq__(self, other):
        return isinstance(other, Hints) and self.order == other.order and self.spouse == other.spouse

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return "Hints(order={0}, spouse={1})".format(list(self.order), list(self.spouse))


def default_hints(n):
    """Returns identity ordering hints for n individuals"""
    return Hints(order=range(1, n+1))


def check_hints(hints, sex):
    """
    Returns a validated copy of the supplied hints

    :param hints: Hints to check
    :type hints: Hints
    :param sex: Sex of each individual
    :type sex: list
    """
    n = len(sex)
    if hints is None or hints.order is None:
        raise HintError("Missing order component")
    if len(hints.order) != n:
        raise HintError("Wrong length for order component: {0} values for {1} individuals".format(len(hints.order), n))
    for value in hints.order:
        if not isinstance(value, numbers.Real) or isinstance(value, bool) or not math.isfinite(value) or value < 0:
            raise HintError("Invalid order value: {0}".format(value))

    spouse = []
    for entry in hints.spouse:
        if len(entry) != 3:
            raise HintError("Invalid spouse hint: {0}".format(entry))
        left, right, anchor = entry
        for i in (left, right):
            if not isinstance(i, numbers.Integral) or i < 0 or i >= n:
                raise HintError("Invalid spouse index in hint: {0}".format(i))
        if left == right:
            raise HintError("Spouse hint pairs individual {0} with itself".format(left))
        if sex[left] == sex[right]:
            raise HintError("Spouse hint ({0}, {1}) is not a male/female marriage".format(left, right))
        if anchor not in (0, 1, 2):
            raise HintError("Invalid spouse anchor in hint: {0}".format(anchor))
        spouse.append(SpouseHint(int(left), int(right), int(anchor)))

    return Hints(order=hints.order, spouse=spouse)


def auto_hints(pedigree, layout, seed=None):
    """
    Computes ordering and spouse hints that reduce repeated individuals

    The pedigree is laid out once with plain ordering; wherever an
    individual is plotted twice on a level, both copies are moved towards
    each other within their sibships and anchored spouse hints are added,
    and the layout is recomputed.

    :param pedigree: Pedigree to compute hints for
    :type pedigree: Pedigree
    :param layout: Callable computing an unrefined PedigreeLayout from Hints
    :type layout: callable
    :param seed: Initial rank per individual, 0 where unknown
    :type seed: list
    """
    start = time.time()
    n = len(pedigree)
    depth = generation_depth(pedigree.father, pedigree.mother, align=True)

    twinrel = [rel for rel in pedigree.relation if rel.code < SPOUSE]
    twinset = [-1]*n
    twinord = [1]*n
    if len(twinrel) > 0:
        twinlist = set(i for rel in twinrel for i in (rel.id1, rel.id2))
        for _ in range(1, len(twinlist)):
            for rel in twinrel:
                newid = min(rel.id1, rel.id2)
                twinset[rel.id1] = newid
                twinset[rel.id2] = newid
                twinord[rel.id2] = max(twinord[rel.id2], twinord[rel.id1] + 1)

    horder = list(seed) if seed is not None else [0]*n
    levels = _unique(depth)
    for d in levels:
        missing = [i for i in range(n) if depth[i] == d and horder[i] == 0]
        for k, i in enumerate(missing):
            horder[i] = k + 1

    if any(t >= 0 for t in twinset):
        # cluster twins next to each other
        for setid in _unique(twinset):
            if setid < 0:
                continue
            who = [i for i in range(n) if twinset[i] == setid]
            mean = sum(horder[i] for i in who)/len(who)
            for i in who:
                horder[i] = mean + twinord[i]/100.0
        for d in levels:
            who = [i for i in range(n) if depth[i] == d]
            for i, r in zip(who, rank([horder[i] for i in who])):
                horder[i] = r

    sptemp = []
    plist = layout(Hints(order=horder, spouse=sptemp))

    for lev in range(len(plist.n)):
        idlist = plist.row(lev)
        dpairs = _duplicate_pairs(idlist, plist, lev, pedigree.sex)
        if len(dpairs) == 0:
            continue

        for pair in dpairs:
            anchor = [0, 0]
            spouse = [None, None]
            for j in range(2):
                goleft = j == 1
                mypos = pair[j]
                if plist.fam[lev][mypos] > 0:
                    # connected to parents at this location
                    anchor[j] = 1
                    sibs = [idlist[s] for s in _find_sibs(mypos, plist, lev)]
                    if len(sibs) > 1:
                        _shift(idlist[mypos], sibs, goleft, horder, twinrel, twinset)
                else:
                    spouse[j] = _find_spouse(mypos, plist, lev, pedigree.sex)
                    if spouse[j] is not None and plist.fam[lev][spouse[j]] > 0:
                        anchor[j] = 2
                        sibs = [idlist[s] for s in _find_sibs(spouse[j], plist, lev)]
                        if len(sibs) > 1:
                            _shift(idlist[spouse[j]], sibs, goleft, horder, twinrel, twinset)

            temp = _marriage_hints(anchor, pair, idlist, spouse)
            if temp is None:
                logger.debug("Unexpected anchor combination %s at level %i, using plain ordering", anchor, lev)
                return default_hints(n)
            sptemp.extend(temp)

        plist = layout(Hints(order=horder, spouse=sptemp))

    logger.info("Automatic hints took %.4fs", time.time()-start)
    return Hints(order=horder, spouse=sptemp)


def _unique(values):
    seen = []
    for v in values:
        if v not in seen:
            seen.append(v)
    return seen


def _marriage_hints(anchor, pair, idlist, spouse):
    id1 = idlist[pair[0]]
    id2 = idlist[spouse[0]] if spouse[0] is not None else None
    id3 = idlist[spouse[1]] if spouse[1] is not None else None
    key = (anchor[0], anchor[1])

    if key == (2, 1):
        hints = [SpouseHint(id2, id1, pair[2])]
    elif key == (2, 2):
        hints = [SpouseHint(id2, id1, 1), SpouseHint(id1, id3, 2)]
    elif key in ((0, 2), (2, 0)):
        hints = [SpouseHint(id2, id1, 0)]
    elif key == (0, 0):
        hints = [SpouseHint(id1, id3, 0), SpouseHint(id2, id1, 0)]
    elif key == (0, 1):
        hints = [SpouseHint(id2, id1, 2)]
    elif key == (1, 0):
        hints = [SpouseHint(id1, id3, 1)]
    else:
        return None
    return [h for h in hints if h.left is not None and h.right is not None]


def _find_spouse(mypos, plist, lev, sex):
    """Returns the column of the first partner of opposite sex in mypos's spouse group"""
    row = plist.spouse[lev]
    lpos = mypos
    while lpos > 0 and row[lpos-1] > 0:
        lpos -= 1
    rpos = mypos
    while rpos < plist.n[lev]-1 and row[rpos] > 0:
        rpos += 1
    if rpos == lpos:
        return None
    mysex = sex[plist.nid[lev][mypos]]
    for p in range(lpos, rpos+1):
        if sex[plist.nid[lev][p]] != mysex:
            return p
    return None


def _find_sibs(mypos, plist, lev):
    family = plist.fam[lev][mypos]
    return [j for j in range(plist.n[lev]) if plist.fam[lev][j] == family]


def _shift(pid, sibs, goleft, horder, twinrel, twinset):
    """Moves pid to the left or right end of its sibship, taking its twins along"""
    if twinset[pid] >= 0:
        values = [horder[s] for s in sibs]
        amount = 1 + max(values) - min(values)
        if goleft:
            amount = -amount
        twins = [s for s in sibs if twinset[s] == twinset[pid]]
        for t in twins:
            horder[t] += amount

        if any((rel.id1 == pid or rel.id2 == pid) and rel.code == MONOZYGOTIC for rel in twinrel):
            mono = [rel for rel in twinrel if rel.code == MONOZYGOTIC]
            monoset = [pid]
            for _ in twins:
                for m in list(monoset):
                    for rel in mono:
                        if rel.id1 == m and rel.id2 not in monoset:
                            monoset.append(rel.id2)
                        if rel.id2 == m and rel.id1 not in monoset:
                            monoset.append(rel.id1)
            for m in monoset:
                horder[m] += amount

    values = [horder[s] for s in sibs]
    if goleft:
        horder[pid] = min(values) - 1
    else:
        horder[pid] = max(values) + 1

    # re-rank to avoid negative values
    for s, r in zip(sibs, rank([horder[s] for s in sibs])):
        horder[s] = r
    return horder


def _duplicate_pairs(idlist, plist, lev, sex):
    """Returns (first column, second column, copy number) for consecutive copies of repeated individuals"""
    counts = {}
    for pid in idlist:
        counts[pid] = counts.get(pid, 0) + 1
    duplicates = [pid for pid in _unique(idlist) if counts[pid] > 1]
    if len(duplicates) == 0:
        return []

    pairs = []
    for pid in duplicates:
        positions = [j for j, other in enumerate(idlist) if other == pid]
        for k in range(1, len(positions)):
            pairs.append((positions[k-1], positions[k], 1 if k <= len(positions)/2 else 2))
    if len(pairs) <= 1:
        return pairs

    def famtouch(pair):
        sib1 = _edge_sib(pair[0], plist, lev, sex, max)
        sib2 = _edge_sib(pair[1], plist, lev, sex, min)
        if sib1 is None or sib2 is None:
            return False
        return sib2 - sib1 == 1

    touching = [famtouch(pair) for pair in pairs]
    # families not touching first, then the widest separated pairs
    ordering = sorted(range(len(pairs)), key=lambda k: (touching[k], pairs[k][0] - pairs[k][1]))
    return [pairs[k] for k in ordering]


def _edge_sib(mypos, plist, lev, sex, pick):
    if plist.fam[lev][mypos] > 0:
        return pick(_find_sibs(mypos, plist, lev))
    sp = _find_spouse(mypos, plist, lev, sex)
    if sp is None or plist.fam[lev][sp] == 0:
        return None
    return pick(_find_sibs(sp, plist, lev))
