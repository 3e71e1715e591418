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
"""Export utilities for writing the include graph to graph file formats."""

import os
import json
import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Dict, Optional, Tuple

import networkx as nx
from networkx.readwrite import json_graph
from packaging.version import parse

from makegen.constants import SUPPORTED_GRAPH_FORMATS, ExportError
from makegen.dependency_graph import DependencyGraph
from makegen.file_utils import strip_extension
from makegen.graph_utils import build_include_digraph, find_strongly_connected_components
from makegen.partitioning import PartitionedFiles

logger = logging.getLogger(__name__)

# Graph format -> (package, minimum version) needed on top of networkx
FORMAT_REQUIREMENTS: Dict[str, Tuple[str, str]] = {".dot": ("pydot", "1.4.2")}


def graph_format(filename: str) -> str:
    """Return the lowercased extension of filename, rejecting unsupported formats.

    Raises:
        ExportError: If the extension is not in SUPPORTED_GRAPH_FORMATS
    """
    ext = os.path.splitext(filename)[1].lower()
    if ext not in SUPPORTED_GRAPH_FORMATS:
        raise ExportError(f"Unsupported graph format '{ext}' (supported: {', '.join(SUPPORTED_GRAPH_FORMATS)})")
    return ext


def check_export_format(filename: str) -> None:
    """Verify that filename can be exported before any work is done.

    Checks the format and that the optional package it needs is installed
    in a recent enough version.

    Raises:
        ExportError: If the format is unsupported or its package is missing or too old
    """
    ext = graph_format(filename)
    requirement = FORMAT_REQUIREMENTS.get(ext)
    if requirement is None:
        return

    package_name, min_version = requirement
    try:
        installed_version = version(package_name)
    except PackageNotFoundError as e:
        raise ExportError(f"{ext} export requires {package_name}. Install with: pip install '{package_name}>={min_version}'") from e

    if parse(installed_version) < parse(min_version):
        raise ExportError(
            f"{package_name} {installed_version} is too old for {ext} export. "
            f"Upgrade with: pip install --upgrade '{package_name}>={min_version}'"
        )

    logger.debug("%s %s available for %s export", package_name, installed_version, ext)


def _category_by_identifier(partitioned: PartitionedFiles) -> Dict[str, str]:
    categories = {identifier: "standalone" for identifier in partitioned.standalone}
    for category, identifiers in partitioned.categories():
        for identifier in identifiers:
            categories[identifier] = category
    return categories


def export_dependency_graph(filename: str, graph: DependencyGraph, partitioned: Optional[PartitionedFiles] = None) -> str:
    """Export the include graph with per-file attributes.

    Supports: GraphML (.graphml), DOT (.dot, requires pydot), GEXF (.gexf), JSON (.json)

    Node attributes:
        - label: File basename
        - path: Project-relative path
        - extension: File extension
        - has_entry_point: Whether the file defines main()
        - fan_in, fan_out: Number of including / included files
        - in_cycle: Whether the file takes part in an include cycle
        - category: Build category of an entry point ("" for other files)

    Args:
        filename: Output filename (extension determines format)
        graph: Dependency graph
        partitioned: Optional build categories of entry points

    Returns:
        The filename written

    Raises:
        ExportError: If the format is unsupported or writing fails
    """
    ext = graph_format(filename)

    G: "nx.DiGraph[Any]" = build_include_digraph(graph)

    cycles, self_loops = find_strongly_connected_components(G)
    files_in_cycles = set(self_loops)
    for cycle in cycles:
        files_in_cycles.update(cycle)

    categories = _category_by_identifier(partitioned) if partitioned is not None else {}

    for node in G.nodes():
        G.nodes[node]["label"] = os.path.basename(node)
        G.nodes[node]["path"] = node
        G.nodes[node]["fan_in"] = G.in_degree(node)
        G.nodes[node]["fan_out"] = G.out_degree(node)
        G.nodes[node]["in_cycle"] = node in files_in_cycles
        G.nodes[node]["category"] = categories.get(strip_extension(node), "") if G.nodes[node]["has_entry_point"] else ""

    try:
        if ext == ".graphml":
            nx.write_graphml(G, filename)
        elif ext == ".dot":
            nx.drawing.nx_pydot.write_dot(G, filename)
        elif ext == ".gexf":
            nx.write_gexf(G, filename)
        else:
            data = json_graph.node_link_data(G)
            with open(filename, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
    except ImportError as e:
        raise ExportError(f"Missing dependency for {ext} export ({e}). Install pydot for DOT format.") from e
    except OSError as e:
        raise ExportError(f"Failed to export graph to {filename}: {e}") from e

    logger.info("Exported dependency graph to %s (%d cycles)", filename, len(cycles) + len(self_loops))
    return filename
