#!/usr/bin/env python3
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
"""Tests for makegen/export_utils.py"""

import os
import json
from importlib.metadata import PackageNotFoundError

import networkx as nx
import pytest

from makegen.constants import ExportError
from makegen.dependency_graph import DependencyGraph, SourceUnit, build_dependency_graph
from makegen import export_utils
from makegen.export_utils import check_export_format, export_dependency_graph
from makegen.partitioning import partition_entry_points


class TestExportDependencyGraph:
    """Tests for export_dependency_graph function."""

    def test_export_graphml(self, categorized_c_project: str, temp_dir: str) -> None:
        """Test GraphML export with node attributes."""
        graph = build_dependency_graph(categorized_c_project, "c").graph
        partitioned = partition_entry_points(graph, "c", ["tests"], ["benchmarks"], ["examples"])
        output = os.path.join(temp_dir, "deps.graphml")

        assert export_dependency_graph(output, graph, partitioned) == output

        G = nx.read_graphml(output)
        assert set(G.nodes()) == set(graph.paths())
        assert G.nodes["lib/core.h"]["label"] == "core.h"
        assert G.nodes["lib/core.h"]["fan_in"] == 4
        assert G.nodes["tests/test_core.c"]["category"] == "tests"
        assert G.nodes["main.c"]["category"] == "standalone"
        assert G.nodes["lib/core.c"]["category"] == ""

    def test_export_json(self, simple_c_project: str, temp_dir: str) -> None:
        graph = build_dependency_graph(simple_c_project, "c").graph
        output = os.path.join(temp_dir, "deps.json")

        export_dependency_graph(output, graph)

        with open(output, "r", encoding="utf-8") as f:
            data = json.load(f)
        nodes = {node["id"]: node for node in data["nodes"]}
        assert set(nodes) == {"main.c", "util.h", "util.c"}
        assert nodes["util.h"]["fan_in"] == 2
        assert nodes["main.c"]["has_entry_point"] is True

    def test_export_gexf(self, simple_c_project: str, temp_dir: str) -> None:
        graph = build_dependency_graph(simple_c_project, "c").graph
        output = os.path.join(temp_dir, "deps.gexf")

        export_dependency_graph(output, graph)
        assert os.path.getsize(output) > 0

    def test_cycle_flag(self, temp_dir: str) -> None:
        graph = DependencyGraph()
        graph.add_unit(SourceUnit("main.c", True, ("a.h",)))
        graph.add_unit(SourceUnit("a.h", False, ("b.h",)))
        graph.add_unit(SourceUnit("b.h", False, ("a.h",)))
        output = os.path.join(temp_dir, "cycle.graphml")

        export_dependency_graph(output, graph)

        G = nx.read_graphml(output)
        assert G.nodes["a.h"]["in_cycle"] is True
        assert G.nodes["b.h"]["in_cycle"] is True
        assert G.nodes["main.c"]["in_cycle"] is False

    def test_unsupported_format(self, temp_dir: str) -> None:
        with pytest.raises(ExportError, match="Unsupported graph format"):
            export_dependency_graph(os.path.join(temp_dir, "deps.png"), DependencyGraph())

    def test_unwritable_destination(self, temp_dir: str) -> None:
        with pytest.raises(ExportError):
            export_dependency_graph(os.path.join(temp_dir, "missing", "deps.json"), DependencyGraph())


class TestCheckExportFormat:
    """Tests for check_export_format function."""

    @pytest.mark.parametrize("filename", ["deps.graphml", "deps.JSON", "out/deps.gexf"])
    def test_formats_without_extra_package(self, filename: str) -> None:
        check_export_format(filename)

    def test_unsupported_format(self) -> None:
        with pytest.raises(ExportError, match="Unsupported graph format"):
            check_export_format("deps.svg")

    def test_dot_without_pydot(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def version(name: str) -> str:
            raise PackageNotFoundError(name)

        monkeypatch.setattr(export_utils, "version", version)

        with pytest.raises(ExportError, match="requires pydot"):
            check_export_format("deps.dot")

    def test_dot_with_old_pydot(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(export_utils, "version", lambda name: "1.0.0")

        with pytest.raises(ExportError, match="too old"):
            check_export_format("deps.dot")

    def test_dot_with_recent_pydot(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(export_utils, "version", lambda name: "3.0.1")
        check_export_format("deps.dot")
