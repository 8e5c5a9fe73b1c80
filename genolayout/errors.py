# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at


class PedigreeError(Exception):
    """Base class for every error raised while laying out a pedigree"""


class PedigreeInputError(PedigreeError, ValueError):
    """The supplied pedigree or hints cannot be laid out"""


class MalformedPedigreeError(PedigreeInputError):
    """Inconsistent pedigree records, e.g. an individual with a single parent"""


class CyclicPedigreeError(PedigreeInputError):
    """Someone is their own ancestor"""


class NoFoundersError(PedigreeInputError):
    """No individual without parents could be found to start the layout from"""


class HintError(PedigreeInputError):
    """Invalid ordering or spouse hints"""


class AlignmentBugError(PedigreeError, RuntimeError):
    """
    An internal invariant of the alignment algorithm does not hold.

    Raised for defects in the layout code itself, never for bad input data.
    """
