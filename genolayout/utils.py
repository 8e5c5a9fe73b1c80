# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

import logging, datetime
import dateparser
import networkx as nx
from scipy.stats import rankdata
logger = logging.getLogger("genolayout")


def strip_pointer(pointer):
    """Returns GEDCOM cross-reference pointer without the enclosing @ signs

    :param pointer: GEDCOM pointer, e.g. "@P12@"
    :type pointer: str
    """
    if not type(pointer) is str:
        return pointer
    return pointer.replace("@", "").strip()


def parse_date(value):
    """Returns a datetime.date for the supplied birth date, or None

    Accepts dates, datetimes and free-text GEDCOM dates; approximate
    qualifiers (ABT, AFT, BEF, ~) are dropped before parsing.

    :param value: Date value
    :type value: str or datetime.date
    """
    if value is None:
        return None
    if type(value) is datetime.datetime:
        return value.date()
    if type(value) is datetime.date:
        return value

    text = str(value).strip()
    if "abt" in text.lower():
        text = text.strip("abtABT. ")
    if "aft" in text.lower():
        text = text.strip("aftAFT. ")
    if "bef" in text.lower():
        text = text.strip("befBEF. ")
    if "~" in text:
        text = text.strip("~ ")
    if len(text) == 0:
        return None

    parsed = dateparser.parse(text)
    if parsed is None:
        logger.warning("Could not parse date: %s", value)
        return None
    return parsed.date()


def parent_graph(father, mother):
    """Returns NetworkX directed graph with an edge from each parent to each child

    :param father: Index of each individual's father, or -1
    :type father: list
    :param mother: Index of each individual's mother, or -1
    :type mother: list
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(range(len(father)))
    for i in range(len(father)):
        for parent in (father[i], mother[i]):
            if parent >= 0:
                graph.add_edge(parent, i)
    return graph


def ancestor_closure(graph, ids):
    """Returns the supplied individual indices together with all their ancestors"""
    found = set(ids)
    for i in ids:
        found.update(nx.ancestors(graph, i))
    return found


def rank(values):
    """Returns 1-based ranks of values, ties receiving their average rank"""
    if len(values) == 0:
        return []
    return [float(r) for r in rankdata(values, method="average")]
