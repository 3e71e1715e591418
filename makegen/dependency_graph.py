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
"""Whole-project include graph construction.

Walks a project tree, parses every source file with the configured extension
and every project file reachable from one through quoted includes, and records
each file once as a SourceUnit keyed by its project-relative path.
"""

import os
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from makegen.constants import (
    LIBRARY_TABLE,
    ConfigurationError,
    IncludeParseError,
    IncludeResolutionError,
    SourceReadError,
)
from makegen.file_utils import has_extension, iter_source_files, read_source_file, to_project_path
from makegen.include_parser import IncludeKind, has_entry_point, parse_includes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceUnit:
    """A parsed project file.

    Attributes:
        path: Project-relative path using "/" separators (unique key)
        has_entry_point: True if the file text defines main()
        direct_includes: Resolved project-relative paths of quoted includes, in line order
    """

    path: str
    has_entry_point: bool
    direct_includes: Tuple[str, ...] = ()

    @property
    def extension(self) -> str:
        """Extension without the leading dot ("" when there is none)."""
        return os.path.splitext(self.path)[1].lstrip(".")


class DependencyGraph:
    """Insertion-ordered mapping of project paths to SourceUnits.

    Units are never replaced: adding a path that is already present is a
    no-op, so rediscovering a file through another include chain is harmless.
    """

    def __init__(self) -> None:
        self._units: Dict[str, SourceUnit] = {}

    def add_unit(self, unit: SourceUnit) -> bool:
        """Insert a unit unless its path is already known.

        Returns:
            True if the unit was inserted, False if the path was already present
        """
        if unit.path in self._units:
            return False
        self._units[unit.path] = unit
        return True

    def get(self, path: str) -> Optional[SourceUnit]:
        return self._units.get(path)

    def paths(self) -> List[str]:
        return list(self._units)

    def units(self) -> List[SourceUnit]:
        return list(self._units.values())

    def compilable_paths(self, extension: str) -> List[str]:
        """Paths of units with the source extension, in insertion order."""
        return [path for path in self._units if has_extension(path, extension)]

    def entry_points(self) -> List[SourceUnit]:
        """Units whose text defines an entry point, in insertion order."""
        return [unit for unit in self._units.values() if unit.has_entry_point]

    def __getitem__(self, path: str) -> SourceUnit:
        return self._units[path]

    def __contains__(self, path: object) -> bool:
        return path in self._units

    def __iter__(self) -> Iterator[str]:
        return iter(self._units)

    def __len__(self) -> int:
        return len(self._units)

    def __repr__(self) -> str:
        return f"DependencyGraph(units={len(self._units)})"


@dataclass(frozen=True)
class ParseResult:
    """Result of scanning a project.

    Attributes:
        graph: Every scanned or reachable project file
        libraries: Link library names in first-seen order, without duplicates
    """

    graph: DependencyGraph
    libraries: Tuple[str, ...]


def resolve_include(project_root: str, including_path: str, include_name: str) -> str:
    """Resolve a quoted include against the including file's directory.

    Args:
        project_root: Canonical (realpath) project root
        including_path: Project-relative path of the file containing the include
        include_name: Literal text between the quotes

    Returns:
        Project-relative path of the included file

    Raises:
        IncludeResolutionError: If the include leaves the project root or names no file
    """
    including_dir = os.path.dirname(os.path.join(project_root, *including_path.split("/")))
    resolved = os.path.realpath(os.path.join(including_dir, include_name))

    if os.path.commonpath([project_root, resolved]) != project_root:
        raise IncludeResolutionError(f"{including_path}: include \"{include_name}\" resolves outside the project root ({resolved})")

    if not os.path.isfile(resolved):
        raise IncludeResolutionError(f"{including_path}: include \"{include_name}\" not found ({resolved})")

    return to_project_path(resolved, project_root)


def canonical_source_path(project_root: str, rel_path: str) -> str:
    """Resolve symlinks in a scanned path so each file has a single graph key.

    Includes are resolved the same way, so a file reached through a symlink
    and through its real name is parsed and compiled once.

    Raises:
        SourceReadError: If the file resolves outside the project root
    """
    resolved = os.path.realpath(os.path.join(project_root, *rel_path.split("/")))

    if os.path.commonpath([project_root, resolved]) != project_root:
        raise SourceReadError(f"{rel_path} resolves outside the project root ({resolved})")

    return to_project_path(resolved, project_root)


def _parse_unit(project_root: str, rel_path: str, libraries: List[str]) -> SourceUnit:
    """Read and parse one file, recording any link libraries it implies."""
    content = read_source_file(project_root, rel_path)

    try:
        references = parse_includes(content)
    except IncludeParseError as e:
        raise IncludeParseError(f"{rel_path}: {e}") from e

    direct_includes: List[str] = []
    for reference in references:
        if reference.kind is IncludeKind.SYSTEM:
            library = LIBRARY_TABLE.get(reference.name)
            if library is not None and library not in libraries:
                logger.debug("%s: <%s> links -l%s", rel_path, reference.name, library)
                libraries.append(library)
        else:
            direct_includes.append(resolve_include(project_root, rel_path, reference.name))

    return SourceUnit(path=rel_path, has_entry_point=has_entry_point(content), direct_includes=tuple(direct_includes))


def _add_reachable_units(project_root: str, start_path: str, graph: DependencyGraph, libraries: List[str]) -> None:
    """Depth-first insertion of start_path and every file it reaches through includes.

    Uses an explicit stack of include iterators instead of recursion, so deep
    include chains cannot exhaust the interpreter stack. A file is inserted
    into the graph as soon as it is parsed, which also makes the graph the
    visited set: include cycles stop at the first repeated file.
    """
    unit = _parse_unit(project_root, start_path, libraries)
    graph.add_unit(unit)
    stack = [iter(unit.direct_includes)]

    while stack:
        include = next(stack[-1], None)
        if include is None:
            stack.pop()
            continue

        if include in graph:
            continue

        unit = _parse_unit(project_root, include, libraries)
        graph.add_unit(unit)
        stack.append(iter(unit.direct_includes))


def build_dependency_graph(project_root: str, extension: str) -> ParseResult:
    """Scan a project and build its include dependency graph.

    Every non-hidden regular file with the given extension is parsed, together
    with every project file reachable from it by quoted includes. System
    includes listed in LIBRARY_TABLE contribute link libraries.

    Args:
        project_root: Root directory of the project
        extension: Source extension without the dot ("c" or "cpp")

    Returns:
        ParseResult with the graph and the ordered library names

    Raises:
        ConfigurationError: If project_root is not a directory
        SourceReadError: If any file cannot be read or a scanned file resolves outside the root
        IncludeParseError: If an include line is malformed
        IncludeResolutionError: If a quoted include cannot be resolved inside the root
    """
    root = os.path.realpath(project_root)
    if not os.path.isdir(root):
        raise ConfigurationError(f"Project root is not a directory: {project_root}")

    graph = DependencyGraph()
    libraries: List[str] = []
    scanned = 0

    for rel_path in iter_source_files(root, extension):
        scanned += 1
        path = canonical_source_path(root, rel_path)
        if path in graph:
            continue
        _add_reachable_units(root, path, graph, libraries)

    logger.info(
        "Scanned %d .%s files, %d files in graph, %d entry points, %d link libraries",
        scanned,
        extension,
        len(graph),
        len(graph.entry_points()),
        len(libraries),
    )

    return ParseResult(graph=graph, libraries=tuple(libraries))
