#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Line-oriented include extraction and entry point detection.

This is a textual heuristic standing in for a real preprocessor:

- An include line is any line that starts with ``#include`` once leading
  whitespace is removed. Macros and conditional compilation are not evaluated,
  so includes inside ``#if 0`` blocks are still reported.
- Angle brackets win over double quotes whenever a ``<`` is followed by a
  ``>`` anywhere on the line. A line such as ``#include "a<b.h>"`` is therefore
  read as a system include of ``b.h``.
- A file defines an entry point when its text contains ``main(``. Comments and
  string literals containing that text produce false positives.
"""

import enum
import logging
from dataclasses import dataclass
from typing import List

from makegen.constants import INCLUDE_DIRECTIVE, ENTRY_POINT_MARKER, IncludeParseError

logger = logging.getLogger(__name__)


class IncludeKind(enum.Enum):
    """How an include names its file."""

    SYSTEM = "system"  # #include <name>
    USER = "user"  # #include "name"


@dataclass(frozen=True)
class IncludeReference:
    """A single classified include directive.

    Attributes:
        kind: SYSTEM for angle-bracket includes, USER for quoted includes
        name: Text between the delimiters, unresolved
    """

    kind: IncludeKind
    name: str

    @classmethod
    def system(cls, name: str) -> "IncludeReference":
        return cls(IncludeKind.SYSTEM, name)

    @classmethod
    def user(cls, name: str) -> "IncludeReference":
        return cls(IncludeKind.USER, name)


def is_include_line(line: str) -> bool:
    """Check if a line is an include directive."""
    return line.lstrip().startswith(INCLUDE_DIRECTIVE)


def extract_include(line: str) -> IncludeReference:
    """Classify the include named on one include line.

    Args:
        line: A line for which is_include_line() returned True

    Returns:
        IncludeReference for the delimited name

    Raises:
        IncludeParseError: If neither <...> nor "..." is complete on the line

    Example:
        >>> extract_include('#include <math.h>')
        IncludeReference(kind=<IncludeKind.SYSTEM: 'system'>, name='math.h')
        >>> extract_include('#include "a.h"')
        IncludeReference(kind=<IncludeKind.USER: 'user'>, name='a.h')
    """
    start = line.find("<")
    end = line.find(">", start + 1) if start != -1 else -1
    if start != -1 and end != -1:
        return IncludeReference.system(line[start + 1 : end])

    start = line.find('"')
    end = line.find('"', start + 1) if start != -1 else -1
    if start != -1 and end != -1:
        return IncludeReference.user(line[start + 1 : end])

    raise IncludeParseError(f"Malformed include directive: {line.strip()!r}")


def parse_includes(content: str) -> List[IncludeReference]:
    """Extract every include directive from file content, in line order.

    Args:
        content: Full text of a source or header file

    Returns:
        List of IncludeReference, one per include line

    Raises:
        IncludeParseError: If an include line is malformed
    """
    return [extract_include(line) for line in content.splitlines() if is_include_line(line)]


def has_entry_point(content: str) -> bool:
    """Check if file content defines the program entry point."""
    return ENTRY_POINT_MARKER in content
