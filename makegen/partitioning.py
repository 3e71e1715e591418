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
"""Partition entry point files into build categories."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from makegen.constants import CategoryOverlapError
from makegen.dependency_graph import DependencyGraph
from makegen.file_utils import has_extension, normalize_identifier, strip_extension

logger = logging.getLogger(__name__)

CATEGORY_NAMES: Tuple[str, ...] = ("tests", "benchmarks", "examples")


@dataclass(frozen=True)
class PartitionedFiles:
    """Entry point identifiers (extension-stripped paths) grouped by build category.

    Attributes:
        standalone: Entry points matching no category
        tests: Entry points under a configured test path
        benchmarks: Entry points under a configured benchmark path
        examples: Entry points under a configured example path
    """

    standalone: Tuple[str, ...] = ()
    tests: Tuple[str, ...] = ()
    benchmarks: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()

    def categories(self) -> List[Tuple[str, Tuple[str, ...]]]:
        """Named categories in emission order: tests, benchmarks, examples."""
        return [(name, getattr(self, name)) for name in CATEGORY_NAMES]


def matches_identifier(identifier: str, configured: str) -> bool:
    """Check if an entry point identifier equals or lies under a configured identifier.

    Matching is by whole path components: "tests" matches "tests" and
    "tests/foo" but not "tests_helper".

    Args:
        identifier: Extension-stripped project path of an entry point
        configured: Normalized configured identifier

    Returns:
        True if identifier equals configured or starts with configured + "/"
    """
    if configured in ("", "."):
        return True
    return identifier == configured or identifier.startswith(configured + "/")


def _normalize_all(identifiers: Iterable[str]) -> List[str]:
    return [normalize_identifier(identifier) for identifier in identifiers]


def partition_entry_points(
    graph: DependencyGraph, extension: str, tests: Sequence[str], benchmarks: Sequence[str], examples: Sequence[str]
) -> PartitionedFiles:
    """Split entry point files into standalone, tests, benchmarks and examples.

    Only files with the source extension are candidates: a header that
    mentions main( cannot be linked on its own.

    Categories are mutually exclusive: a file matching identifiers of two or
    more categories is a configuration error rather than a duplicated target.

    Args:
        graph: Dependency graph
        extension: Source extension without the dot
        tests: Configured test files or directories
        benchmarks: Configured benchmark files or directories
        examples: Configured example files or directories

    Returns:
        PartitionedFiles with identifiers in graph order

    Raises:
        CategoryOverlapError: If an entry point belongs to more than one category
    """
    configured: Dict[str, List[str]] = {
        "tests": _normalize_all(tests),
        "benchmarks": _normalize_all(benchmarks),
        "examples": _normalize_all(examples),
    }
    members: Dict[str, List[str]] = {name: [] for name in CATEGORY_NAMES}
    standalone: List[str] = []

    for unit in graph.entry_points():
        if not has_extension(unit.path, extension):
            continue

        identifier = strip_extension(unit.path)
        matched = [name for name in CATEGORY_NAMES if any(matches_identifier(identifier, c) for c in configured[name])]

        if len(matched) > 1:
            raise CategoryOverlapError(f"{unit.path} matches more than one build category ({', '.join(matched)}); adjust the configured paths")

        if matched:
            members[matched[0]].append(identifier)
        else:
            standalone.append(identifier)

    logger.info(
        "Partitioned entry points: %d standalone, %d tests, %d benchmarks, %d examples",
        len(standalone),
        len(members["tests"]),
        len(members["benchmarks"]),
        len(members["examples"]),
    )

    return PartitionedFiles(
        standalone=tuple(standalone),
        tests=tuple(members["tests"]),
        benchmarks=tuple(members["benchmarks"]),
        examples=tuple(members["examples"]),
    )
