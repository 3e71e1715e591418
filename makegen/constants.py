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
"""Shared constants for makegen.

This module provides centralized constants used across the makegen modules
to ensure consistency and make it easy to adjust defaults.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# Version
# =============================================================================

MAKEGEN_VERSION = "2.2"

# =============================================================================
# Source Scanning Constants
# =============================================================================

SUPPORTED_EXTENSIONS: Tuple[str, ...] = ("c", "cpp")

# Header extensions that pair with a source file of the same stem
HEADER_EXTENSIONS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "c": (".h",),
        "cpp": (".h", ".hpp", ".hh", ".hxx"),
    }
)

INCLUDE_DIRECTIVE = "#include"  # Include lines must start with this after leading whitespace
ENTRY_POINT_MARKER = "main("  # Substring that marks a file as defining an entry point

# System header -> link library name. Read-only for the whole process.
LIBRARY_TABLE: Mapping[str, str] = MappingProxyType(
    {
        "math.h": "m",
        "pthread.h": "pthread",
        "ncurses.h": "ncurses",
    }
)

# =============================================================================
# Build Option Defaults
# =============================================================================

DEFAULT_COMPILERS: Mapping[str, str] = MappingProxyType({"c": "gcc", "cpp": "g++"})
DEFAULT_STANDARDS: Mapping[str, str] = MappingProxyType({"c": "c99", "cpp": "c++11"})
DEFAULT_OPT_LEVEL = "O0"
DEFAULT_TESTS: Tuple[str, ...] = ("tests",)
DEFAULT_BENCHMARKS: Tuple[str, ...] = ("benchmarks",)
DEFAULT_EXAMPLES: Tuple[str, ...] = ("examples",)

# =============================================================================
# Makefile Constants
# =============================================================================

DEFAULT_MAKEFILE_NAME = "Makefile"
OBJECT_DIR = ".OBJ"
STANDALONE_PREFIX = "bin_"  # Prefix for standalone binaries other than the main program
BASE_CFLAGS = "-Wall"

# =============================================================================
# Graph Export Constants
# =============================================================================

SUPPORTED_GRAPH_FORMATS = [".graphml", ".dot", ".gexf", ".json"]

# =============================================================================
# Exception Classes
# =============================================================================


class MakeGenError(Exception):
    """Base exception for all makegen errors.

    All makegen exceptions carry an exit_code attribute that indicates
    what exit code the program should use when this error is caught at the
    main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Validation errors (EXIT_INVALID_ARGS)
class ValidationError(MakeGenError):
    """Raised when input validation fails (arguments, paths, etc)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class ConfigurationError(ValidationError):
    """Raised when build options are missing or invalid."""


class CategoryOverlapError(ValidationError):
    """Raised when an entry point matches more than one build category."""


# Scan errors (EXIT_RUNTIME_ERROR)
class SourceReadError(MakeGenError):
    """Raised when a scanned file cannot be read as UTF-8 text."""


class IncludeParseError(MakeGenError):
    """Raised when an include line has no complete delimiter pair."""


class IncludeResolutionError(MakeGenError):
    """Raised when a user include resolves outside the project root or to a missing file."""


class GraphConsistencyError(MakeGenError):
    """Raised when a closure lookup references a path absent from the dependency graph."""


class ExportError(MakeGenError):
    """Raised when exporting the dependency graph fails."""


class OutputWriteError(MakeGenError):
    """Raised when the generated Makefile cannot be written."""
