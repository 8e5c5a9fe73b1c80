# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

import logging, time
from collections import namedtuple
import gedcom
import networkx as nx
from .errors import CyclicPedigreeError, MalformedPedigreeError
from .utils import parent_graph, parse_date, strip_pointer
logger = logging.getLogger("genolayout")

MONOZYGOTIC = 1
DIZYGOTIC = 2
UNKNOWN_TWIN = 3
SPOUSE = 4

SEXES = {
    "male": "male",
    "m": "male",
    "female": "female",
    "f": "female",
    "unknown": "unknown",
    "u": "unknown",
}

RELATIONSHIP_CODES = {
    "monozygotic-twin": MONOZYGOTIC,
    "dizygotic-twin": DIZYGOTIC,
    "twin": UNKNOWN_TWIN,
    "partner": SPOUSE,
    "ex-partner": SPOUSE,
}

Relation = namedtuple("Relation", ["id1", "id2", "code"])


def normalize_sex(sex):
    if sex is None:
        return "unknown"
    return SEXES.get(str(sex).strip().lower(), "unknown")


class Pedigree(object):
    def __init__(self, ids, sex, father, mother, relation=None, birth=None, name=None):
        """
        Pedigree - defines the individuals and relationships to be laid out

        :param ids: Identity of each individual, index-addressed
        :type ids: list
        :param sex: Sex of each individual (male, female, unknown)
        :type sex: list
        :param father: Index of each individual's father, or -1
        :type father: list
        :param mother: Index of each individual's mother, or -1
        :type mother: list
        :param relation: Twin and spouse relations as (id1, id2, code) triples
        :type relation: list
        :param birth: Birth date of each individual, used to seed sibling order
        :type birth: list
        :param name: Pedigree name
        :type name: str
        """
        self.name = name
        self.ids = tuple(ids)
        self.sex = tuple(normalize_sex(s) for s in sex)
        self.father = tuple(int(f) for f in father)
        self.mother = tuple(int(m) for m in mother)
        self.relation = tuple(Relation(int(r[0]), int(r[1]), int(r[2])) for r in (relation or ()))
        self.birth = tuple(birth) if birth is not None else (None,)*len(self.ids)
        self._graph = None

        self._check()

    def _check(self):
        n = len(self.ids)
        if n == 0:
            raise MalformedPedigreeError("Pedigree has no individuals")
        for field in ("sex", "father", "mother", "birth"):
            if len(getattr(self, field)) != n:
                raise MalformedPedigreeError("Pedigree {0} has {1} entries for {2} individuals".format(field, len(getattr(self, field)), n))
        for i in range(n):
            for parent in (self.father[i], self.mother[i]):
                if parent < -1 or parent >= n:
                    raise MalformedPedigreeError("Parent index {0} of individual {1} is out of range".format(parent, i))
        for rel in self.relation:
            if not (0 <= rel.id1 < n and 0 <= rel.id2 < n):
                raise MalformedPedigreeError("Relation {0} references an unknown individual".format(tuple(rel)))
            if rel.id1 == rel.id2:
                raise MalformedPedigreeError("Relation {0} links an individual to itself".format(tuple(rel)))
            if rel.code < MONOZYGOTIC or rel.code > SPOUSE:
                raise MalformedPedigreeError("Relation {0} has an invalid code".format(tuple(rel)))

    def __len__(self):
        """Returns number of individuals in pedigree"""
        return len(self.ids)

    def index(self, pid):
        """Returns the index of the individual with the specified identity

        :param pid: Individual identity
        :type pid: object
        """
        return self.ids.index(pid)

    def is_founder(self, i):
        """Returns whether the individual at index i has no recorded parents"""
        return self.father[i] < 0 and self.mother[i] < 0

    def graph(self):
        """Returns NetworkX directed graph with an edge from each parent to each child"""
        if self._graph is None:
            self._graph = parent_graph(self.father, self.mother)
        return self._graph

    def ancestors(self, i):
        """Returns the set of ancestor indices of the individual at index i"""
        return nx.ancestors(self.graph(), i)

    def is_consanguineous(self, i, j):
        """Returns whether the specified individuals share a common ancestor"""
        return len(self.ancestors(i) & self.ancestors(j)) > 0

    def validate(self):
        """
        Checks that the pedigree can be laid out

        Raises CyclicPedigreeError when someone is their own ancestor and
        MalformedPedigreeError when someone has exactly one recorded parent.
        """
        try:
            cycle = nx.find_cycle(self.graph())
        except nx.NetworkXNoCycle:
            cycle = None
        if cycle is not None:
            members = sorted(set(u for u, v in cycle))
            logger.critical("Impossible pedigree, individuals %s are their own ancestors", members)
            raise CyclicPedigreeError("Impossible pedigree: someone is their own ancestor (individuals {0})".format(members))

        for i in range(len(self)):
            if (self.father[i] < 0) != (self.mother[i] < 0):
                logger.critical("Individual %i (%s) has exactly one recorded parent", i, self.ids[i])
                raise MalformedPedigreeError("Everyone must have 0 parents or 2 parents, not just one (individual {0})".format(self.ids[i]))

    def birth_order(self):
        """Returns rank of each individual's birth date, 0 where the date is unknown"""
        dates = [parse_date(b) for b in self.birth]
        ranks = {d: k+1 for k, d in enumerate(sorted(set(d for d in dates if d is not None)))}
        return [ranks[d] if d is not None else 0 for d in dates]

    @classmethod
    def from_records(cls, individuals, relationships, name=None):
        """
        Builds a pedigree from keyed individual and relationship records

        Parent edges point from parent (source) to child (target); a male
        parent fills the father slot, anyone else the mother slot. Individuals
        left with a single parent are treated as founders.

        :param individuals: Records with "id" and optional "sex" and "birth"
        :type individuals: list
        :param relationships: Records with "source", "target" and "type"
        :type relationships: list
        :param name: Pedigree name
        :type name: str
        """
        individuals = list(individuals)
        ids = [rec["id"] for rec in individuals]
        index = {pid: i for i, pid in enumerate(ids)}
        sex = [normalize_sex(rec.get("sex")) for rec in individuals]
        birth = [rec.get("birth") for rec in individuals]
        father = [-1]*len(ids)
        mother = [-1]*len(ids)
        relation = []

        for rel in relationships:
            source = index.get(rel["source"])
            target = index.get(rel["target"])
            if source is None or target is None:
                logger.debug("Skipping relationship with unknown individual: %s", rel)
                continue
            kind = rel.get("type", "parent")
            if kind == "parent":
                if sex[source] == "male" and father[target] < 0:
                    father[target] = source
                elif mother[target] < 0:
                    mother[target] = source
                else:
                    father[target] = source
            elif kind in RELATIONSHIP_CODES:
                relation.append((source, target, RELATIONSHIP_CODES[kind]))
            else:
                logger.warning("Unknown relationship type '%s' between %s and %s", kind, rel["source"], rel["target"])

        for i in range(len(ids)):
            if (father[i] < 0) != (mother[i] < 0):
                logger.warning("Individual %s has only one parent, treating as founder", ids[i])
                father[i] = -1
                mother[i] = -1

        return cls(ids, sex, father, mother, relation=relation, birth=birth, name=name)

    @classmethod
    def from_gedcom(cls, gedcom_file, name=None):
        """
        Builds a pedigree from a GEDCOM file

        :param gedcom_file: GEDCOM file path
        :type gedcom_file: str
        :param name: Pedigree name
        :type name: str
        """
        logger.debug("Processing GEDCOM: %s", gedcom_file)
        start = time.time()
        parsed = gedcom.parse(gedcom_file)

        records = []
        for individual in parsed.individuals:
            record = {"id": strip_pointer(individual.id)}
            try:
                record["sex"] = individual.sex
            except Exception:
                record["sex"] = "U"
            try:
                birth = individual.birth
                if type(birth) is list:
                    birth = birth[0]
                record["birth"] = birth.date
            except Exception:
                record["birth"] = None
            records.append(record)

        relationships = []
        for family in parsed.families:
            parents = [strip_pointer(person.value) for person in family.partners]
            children = [strip_pointer(el.value) for el in family.child_elements if el.tag == "CHIL"]
            if len(parents) == 2:
                relationships.append({"source": parents[0], "target": parents[1], "type": "partner"})
            for child in children:
                for parent in parents:
                    relationships.append({"source": parent, "target": child, "type": "parent"})

        pedigree = cls.from_records(records, relationships, name=name)
        logger.info("Parsing GEDCOM complete: %i individuals found, took %.4fs", len(pedigree), time.time()-start)
        return pedigree
