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
"""Tests for makeGen.py command-line tool."""

import os
import sys
import json
from importlib.metadata import PackageNotFoundError
from typing import Callable, Dict

import pytest

import makeGen
from makegen import export_utils
from makegen.config import BuildOptions
from makegen.constants import CategoryOverlapError, ConfigurationError, ExportError, IncludeResolutionError


def read_makefile(project_root: str, name: str = "Makefile") -> str:
    with open(os.path.join(project_root, name), "r", encoding="utf-8") as f:
        return f.read()


class TestGenerateMakefile:
    """Tests for generate_makefile pipeline."""

    def test_pipeline_result(self, simple_c_project: str) -> None:
        result = makeGen.generate_makefile(simple_c_project, BuildOptions.create(extension="c", binary="prog"))

        assert result.parse_result.libraries == ("m",)
        assert list(result.closures) == ["main.c", "util.c"]
        assert result.partitioned.standalone == ("main",)
        assert result.content.startswith("CC := gcc\n")

    def test_nothing_written(self, simple_c_project: str) -> None:
        makeGen.generate_makefile(simple_c_project, BuildOptions.create(extension="c", binary="prog"))
        assert not os.path.exists(os.path.join(simple_c_project, "Makefile"))


class TestMain:
    """Tests for main() entry point."""

    def test_writes_makefile(self, simple_c_project: str) -> None:
        """Test that a Makefile is written into the project root."""
        assert makeGen.main(["-e", "c", "-b", "prog", "--root", simple_c_project]) == 0

        content = read_makefile(simple_c_project)
        assert "binaries: prog\n" in content
        assert "MAIN_OBJECT_DEPS := $(ODIR)/main.o $(ODIR)/util.o\n" in content
        assert "UTIL_SOURCE_DEPS := util.c util.h\n" in content
        assert "$(ODIR)/util.o: $(ODIR) $(UTIL_SOURCE_DEPS)\n" in content

    def test_long_options(self, categorized_c_project: str) -> None:
        argv = [
            "--extension", "c",
            "--binary", "app",
            "--compiler", "clang",
            "--std", "c11",
            "--opt", "O3",
            "--tests", "tests", "examples",
            "--benchmarks", "benchmarks",
            "--examples", "nothing_here",
            "--root", categorized_c_project,
        ]  # fmt: skip
        assert makeGen.main(argv) == 0

        content = read_makefile(categorized_c_project)
        assert "CC := clang\n" in content
        assert "CFLAGS += -std=c11\n" in content
        assert "CFLAGS += -O3\n" in content
        assert "tests: tests_test_core examples_demo\n" in content
        assert "\nexamples:" not in content

    def test_custom_output(self, simple_c_project: str, temp_dir: str) -> None:
        output = os.path.join(temp_dir, "build.mk")
        assert makeGen.main(["-e", "c", "-b", "prog", "--root", simple_c_project, "-o", output]) == 0

        assert os.path.isfile(output)
        assert not os.path.exists(os.path.join(simple_c_project, "Makefile"))

    def test_stdout(self, simple_c_project: str, capsys: pytest.CaptureFixture[str]) -> None:
        assert makeGen.main(["-e", "c", "-b", "prog", "--root", simple_c_project, "--stdout"]) == 0

        assert "binaries: prog\n" in capsys.readouterr().out
        assert not os.path.exists(os.path.join(simple_c_project, "Makefile"))

    def test_failed_run_keeps_existing_makefile(self, make_project: Callable[[Dict[str, str]], str]) -> None:
        """Test that a scan failure leaves the previous Makefile untouched."""
        root = make_project({"main.c": '#include "missing.h"\nint main(void) {}\n', "Makefile": "previous\n"})

        with pytest.raises(IncludeResolutionError):
            makeGen.main(["-e", "c", "-b", "prog", "--root", root])

        assert read_makefile(root) == "previous\n"

    def test_missing_required_options(self, simple_c_project: str) -> None:
        with pytest.raises(ConfigurationError):
            makeGen.main(["-b", "prog", "--root", simple_c_project])
        with pytest.raises(ConfigurationError):
            makeGen.main(["-e", "c", "--root", simple_c_project])

    def test_unsupported_extension(self, simple_c_project: str) -> None:
        with pytest.raises(ConfigurationError):
            makeGen.main(["-e", "rs", "-b", "prog", "--root", simple_c_project])

    def test_warns_without_main_file(self, make_project: Callable[[Dict[str, str]], str], capsys: pytest.CaptureFixture[str]) -> None:
        root = make_project({"other.c": "int main(void) {}\n"})

        assert makeGen.main(["-e", "c", "-b", "prog", "--root", root]) == 0

        assert "main.c" in capsys.readouterr().err
        assert "binaries: bin_other\n" in read_makefile(root)

    def test_export_graph(self, simple_c_project: str, temp_dir: str) -> None:
        output = os.path.join(temp_dir, "graph.json")
        assert makeGen.main(["-e", "c", "-b", "prog", "--root", simple_c_project, "--export-graph", output]) == 0

        with open(output, "r", encoding="utf-8") as f:
            data = json.load(f)
        assert {node["id"] for node in data["nodes"]} == {"main.c", "util.h", "util.c"}

    def test_missing_export_package_checked_first(self, simple_c_project: str, temp_dir: str, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a missing pydot fails the run before the Makefile is written."""

        def version(name: str) -> str:
            raise PackageNotFoundError(name)

        monkeypatch.setattr(export_utils, "version", version)

        with pytest.raises(ExportError, match="pydot"):
            makeGen.main(["-e", "c", "-b", "prog", "--root", simple_c_project, "--export-graph", os.path.join(temp_dir, "deps.dot")])

        assert not os.path.exists(os.path.join(simple_c_project, "Makefile"))

    def test_unsupported_export_format(self, simple_c_project: str, temp_dir: str) -> None:
        with pytest.raises(ExportError, match="Unsupported graph format"):
            makeGen.main(["-e", "c", "-b", "prog", "--root", simple_c_project, "--export-graph", os.path.join(temp_dir, "deps.svg")])

        assert not os.path.exists(os.path.join(simple_c_project, "Makefile"))

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            makeGen.main(["--version"])
        assert exc_info.value.code == 0
        assert "makegen 2.2" in capsys.readouterr().out


class TestCli:
    """Tests for exit code mapping in cli()."""

    def run_cli(self, monkeypatch: pytest.MonkeyPatch, argv: list) -> int:
        monkeypatch.setattr(sys, "argv", ["makeGen.py", *argv])
        with pytest.raises(SystemExit) as exc_info:
            makeGen.cli()
        return exc_info.value.code

    def test_success(self, simple_c_project: str, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self.run_cli(monkeypatch, ["-e", "c", "-b", "prog", "--root", simple_c_project]) == 0

    def test_configuration_error(self, simple_c_project: str, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        assert self.run_cli(monkeypatch, ["-e", "java", "-b", "prog", "--root", simple_c_project]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_category_overlap(self, categorized_c_project: str, monkeypatch: pytest.MonkeyPatch) -> None:
        argv = ["-e", "c", "-b", "app", "--root", categorized_c_project, "--tests", "tests", "--examples", "tests/test_core.c"]
        assert self.run_cli(monkeypatch, argv) == CategoryOverlapError("").exit_code

    def test_runtime_error(self, make_project: Callable[[Dict[str, str]], str], monkeypatch: pytest.MonkeyPatch) -> None:
        root = make_project({"main.c": "#include broken\n"})
        assert self.run_cli(monkeypatch, ["-e", "c", "-b", "prog", "--root", root]) == 2

    def test_argparse_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self.run_cli(monkeypatch, ["--opt"]) == 2

    def test_export_dependency_missing(self, simple_c_project: str, temp_dir: str, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a missing export package goes through the regular error path."""

        def version(name: str) -> str:
            raise PackageNotFoundError(name)

        monkeypatch.setattr(export_utils, "version", version)
        argv = ["-e", "c", "-b", "prog", "--root", simple_c_project, "--export-graph", os.path.join(temp_dir, "deps.dot")]
        assert self.run_cli(monkeypatch, argv) == 2
