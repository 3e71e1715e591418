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
"""Graph utilities for include dependency closures using NetworkX."""

import logging
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

import networkx as nx

from makegen.constants import HEADER_EXTENSIONS, GraphConsistencyError
from makegen.dependency_graph import DependencyGraph
from makegen.file_utils import has_extension, strip_extension

logger = logging.getLogger(__name__)


def complementary_file(path: str, extension: str, graph: DependencyGraph) -> Optional[str]:
    """Find the same-stem partner of a file.

    A source file's partner is its header ("foo.c" -> "foo.h"); any other
    file's partner is the source file ("foo.h" -> "foo.c"). Only partners
    present in the graph are returned.

    Args:
        path: Project-relative path
        extension: Source extension without the dot
        graph: Dependency graph

    Returns:
        Partner path, or None if the graph has none
    """
    stem = strip_extension(path)

    if has_extension(path, extension):
        for header_ext in HEADER_EXTENSIONS.get(extension, (".h",)):
            candidate = f"{stem}{header_ext}"
            if candidate in graph:
                return candidate
        return None

    candidate = f"{stem}.{extension}"
    return candidate if candidate in graph else None


def _closure_successors(path: str, extension: str, graph: DependencyGraph) -> Iterator[str]:
    """Yield each direct include of path followed by that include's partner."""
    unit = graph.get(path)
    if unit is None:
        raise GraphConsistencyError(f"Closure lookup of unknown file: {path}")

    for include in unit.direct_includes:
        yield include

        partner = complementary_file(include, extension, graph)
        if partner is not None:
            yield partner


def compute_transitive_closure(graph: DependencyGraph, path: str, extension: str) -> List[str]:
    """Compute every file a compilable file depends on.

    The walk is a depth-first pre-order starting at path. For each direct
    include, the include is visited first and then its complementary file, so
    "foo.c" is pulled in whenever "foo.h" is reached even if nothing includes
    "foo.c". The seen set belongs to this call only.

    Args:
        graph: Dependency graph
        path: Project-relative path of the file to resolve
        extension: Source extension without the dot

    Returns:
        Deduplicated list of paths, starting with path itself

    Raises:
        GraphConsistencyError: If path or any reached file is missing from the graph
    """
    closure = [path]
    seen: Set[str] = {path}
    stack = [_closure_successors(path, extension, graph)]

    while stack:
        dependency = next(stack[-1], None)
        if dependency is None:
            stack.pop()
            continue

        if dependency in seen:
            continue

        seen.add(dependency)
        closure.append(dependency)
        stack.append(_closure_successors(dependency, extension, graph))

    return closure


def flatten_dependencies(graph: DependencyGraph, extension: str) -> Dict[str, List[str]]:
    """Compute the transitive closure of every compilable file in the graph.

    Args:
        graph: Dependency graph
        extension: Source extension without the dot

    Returns:
        Mapping of compilable path to its closure, in graph order
    """
    closures = {path: compute_transitive_closure(graph, path, extension) for path in graph.compilable_paths(extension)}
    logger.debug("Computed closures for %d compilable files", len(closures))
    return closures


def build_include_digraph(graph: DependencyGraph) -> "nx.DiGraph[Any]":
    """Build a NetworkX directed graph of direct includes.

    Nodes carry the unit's entry point flag and extension.

    Args:
        graph: Dependency graph

    Returns:
        NetworkX DiGraph with an edge from each file to each file it includes
    """
    G: nx.DiGraph[str] = nx.DiGraph()

    for unit in graph.units():
        G.add_node(unit.path, has_entry_point=unit.has_entry_point, extension=unit.extension)

    edges = [(unit.path, include) for unit in graph.units() for include in unit.direct_includes]
    G.add_edges_from(edges)

    logger.debug("Built graph with %s nodes and %s edges", G.number_of_nodes(), G.number_of_edges())
    return G


def find_strongly_connected_components(graph: "nx.DiGraph[Any]") -> Tuple[List[Set[str]], List[str]]:
    """Find strongly connected components (cycles) and self-loops in a directed graph.

    Args:
        graph: NetworkX DiGraph

    Returns:
        Tuple of (cycles, self_loops) where:
        - cycles: List of sets containing files in multi-file include cycles
        - self_loops: List of files that include themselves
    """
    cycles = []
    self_loops = []
    for scc in nx.strongly_connected_components(graph):
        if len(scc) > 1:
            cycles.append(scc)
        elif len(scc) == 1:
            node = next(iter(scc))
            if graph.has_edge(node, node):
                self_loops.append(node)

    return cycles, self_loops
