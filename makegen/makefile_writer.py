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
"""Makefile rendering and atomic output.

The generated Makefile has this layout:

    CC / CFLAGS / LFLAGS variables
    ODIR := .OBJ
    <STEM>_SOURCE_DEPS per compilable file (its own source plus direct includes)
    all, $(ODIR) and binaries targets
    <STEM>_OBJECT_DEPS + link rule per standalone binary
    tests / benchmarks / examples aggregate targets, each followed by its members' link rules
    $(ODIR)/<stem>.o compile rule per compilable file
    clean

Path separators in identifiers become "_" so they are valid variable and
target names. Link targets and their output files share the same name.
"""

import os
import logging
import tempfile
from typing import Dict, List, Sequence

from makegen.config import BuildOptions
from makegen.constants import BASE_CFLAGS, OBJECT_DIR, STANDALONE_PREFIX, GraphConsistencyError, OutputWriteError
from makegen.dependency_graph import DependencyGraph
from makegen.file_utils import escape_path, has_extension, normalize_identifier, strip_extension
from makegen.partitioning import PartitionedFiles

logger = logging.getLogger(__name__)


def source_deps_var_name(identifier: str) -> str:
    """Variable holding a file's compile prerequisites ("src/foo" -> "SRC_FOO_SOURCE_DEPS")."""
    return f"{escape_path(identifier).upper()}_SOURCE_DEPS"


def object_deps_var_name(identifier: str) -> str:
    """Variable holding a binary's object files ("src/foo" -> "SRC_FOO_OBJECT_DEPS")."""
    return f"{escape_path(identifier).upper()}_OBJECT_DEPS"


def object_path(identifier: str) -> str:
    return f"$(ODIR)/{escape_path(identifier)}.o"


def standalone_binary_name(identifier: str, options: BuildOptions) -> str:
    """Name of the binary linked from a standalone entry point.

    The entry point matching the configured main file becomes the configured
    binary; every other one is named after its own path.
    """
    if identifier == normalize_identifier(options.main_file):
        return options.binary
    return f"{STANDALONE_PREFIX}{escape_path(identifier)}"


def _variable(name: str, values: Sequence[str], operator: str = ":=") -> str:
    return f"{name} {operator} {' '.join(values)}".rstrip()


def _compiler_block(options: BuildOptions, libraries: Sequence[str]) -> List[str]:
    return [
        _variable("CC", [options.compiler]),
        _variable("CFLAGS", [BASE_CFLAGS]),
        _variable("CFLAGS", [f"-std={options.standard}"], "+="),
        _variable("CFLAGS", [f"-{options.opt_level}"], "+="),
        _variable("LFLAGS", [f"-l{library}" for library in libraries]),
    ]


def _source_deps_block(graph: DependencyGraph, closures: Dict[str, List[str]]) -> List[str]:
    lines = []
    for path in closures:
        unit = graph[path]
        lines.append(_variable(source_deps_var_name(strip_extension(path)), [path, *unit.direct_includes]))
    return lines


def _link_block(target: str, identifier: str, options: BuildOptions, closures: Dict[str, List[str]]) -> List[str]:
    source = f"{identifier}.{options.extension}"
    closure = closures.get(source)
    if closure is None:
        raise GraphConsistencyError(f"No dependency closure for entry point {source}")

    var_name = object_deps_var_name(identifier)
    objects = [object_path(strip_extension(dependency)) for dependency in closure if has_extension(dependency, options.extension)]

    return [
        _variable(var_name, objects),
        f"{target}: $(ODIR) $({var_name})",
        f"\t$(CC) $(CFLAGS) $({var_name}) -o {target} $(LFLAGS)",
    ]


def _compile_block(path: str) -> List[str]:
    identifier = strip_extension(path)
    output = object_path(identifier)
    return [
        f"{output}: $(ODIR) $({source_deps_var_name(identifier)})",
        f"\t$(CC) -c $(CFLAGS) {path} -o {output}",
    ]


def render_makefile(
    options: BuildOptions, graph: DependencyGraph, closures: Dict[str, List[str]], partitioned: PartitionedFiles, libraries: Sequence[str]
) -> str:
    """Render the complete Makefile text.

    Args:
        options: Build options
        graph: Dependency graph
        closures: Transitive closure of every compilable file (see flatten_dependencies)
        partitioned: Entry points grouped by category
        libraries: Link library names in order

    Returns:
        Makefile content ending with a newline

    Raises:
        GraphConsistencyError: If an entry point has no closure
    """
    blocks: List[List[str]] = [
        _compiler_block(options, libraries),
        [_variable("ODIR", [OBJECT_DIR])],
        _source_deps_block(graph, closures),
        ["all: binaries"],
        ["$(ODIR):", "\t@mkdir -p $(ODIR)"],
    ]

    standalone = [(standalone_binary_name(identifier, options), identifier) for identifier in partitioned.standalone]
    blocks.append([f"binaries: {' '.join(target for target, _ in standalone)}".rstrip()])
    for target, identifier in standalone:
        blocks.append(_link_block(target, identifier, options, closures))

    produced = [target for target, _ in standalone]
    for category, identifiers in partitioned.categories():
        if not identifiers:
            continue

        targets = [escape_path(identifier) for identifier in identifiers]
        blocks.append([f"{category}: {' '.join(targets)}"])
        for target, identifier in zip(targets, identifiers):
            blocks.append(_link_block(target, identifier, options, closures))
        produced.extend(targets)

    for path in closures:
        blocks.append(_compile_block(path))

    blocks.append([".PHONY: clean", "clean:", f"\trm -rf {' '.join([OBJECT_DIR, *produced])}"])

    logger.debug("Rendered %d Makefile blocks, %d binaries", len(blocks), len(produced))
    return "\n\n".join("\n".join(block) for block in blocks if block) + "\n"


def write_makefile(output_path: str, content: str) -> None:
    """Write the Makefile atomically.

    Content goes to a temporary file in the target directory which then
    replaces output_path, so a failed run never leaves a partial Makefile.

    Args:
        output_path: Destination path
        content: Rendered Makefile text

    Raises:
        OutputWriteError: If the file cannot be written
    """
    output_dir = os.path.dirname(os.path.abspath(output_path))
    temp_path = None

    try:
        with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=output_dir, prefix=".makegen_", suffix=".tmp", delete=False) as f:
            temp_path = f.name
            f.write(content)

        os.chmod(temp_path, 0o644)
        os.replace(temp_path, output_path)
        temp_path = None
        logger.info("Wrote %s", output_path)

    except OSError as e:
        raise OutputWriteError(f"Failed to write {output_path}: {e}") from e

    finally:
        if temp_path is not None and os.path.exists(temp_path):
            os.remove(temp_path)
