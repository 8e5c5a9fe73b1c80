# Copyright (c) 2017 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

__version__ = "0.1.0"

__copyright__ = """
    Copyright (c) 2017 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
    This software is the confidential and proprietary information of
    Welded Anvil Technologies (David D. Newell) ("Confidential Information").
    You shall not disclose such Confidential Information and shall use it
    only in accordance with the terms of the license agreement you entered
    into with Welded Anvil Technologies (David D. Newell).
    @author david@newell.at
"""

__author__ = "David D. Newell <david@newell.at>"

import logging, time
logger = logging.getLogger("genolayout")
import coloredlogs
coloredlogs.install(level="INFO", logger=logger)

from .errors import (PedigreeError, PedigreeInputError, MalformedPedigreeError, CyclicPedigreeError,
                     NoFoundersError, HintError, AlignmentBugError)
from .pedigree import Pedigree, Relation, MONOZYGOTIC, DIZYGOTIC, UNKNOWN_TWIN, SPOUSE
from .hints import Hints, SpouseHint, auto_hints, check_hints, default_hints
from .depth import generation_depth
from .layout import PedigreeAligner, PedigreeLayout, align_pedigree
from .quadprog import QPError, InfeasibleProblemError, solve_qp


def main(gedcom_file, **kwargs):
    """Lays out the pedigree in a GEDCOM file and returns its PedigreeLayout"""
    pstart = time.time()
    pedigree = Pedigree.from_gedcom(gedcom_file)
    layout = align_pedigree(pedigree, **kwargs)

    logger.info("Total time to lay out %i individuals: %.2fs", len(pedigree), time.time() - pstart)

    return layout
