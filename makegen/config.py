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
"""Build options shared by the scanner and the Makefile writer."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from makegen.constants import (
    SUPPORTED_EXTENSIONS,
    DEFAULT_COMPILERS,
    DEFAULT_STANDARDS,
    DEFAULT_OPT_LEVEL,
    DEFAULT_TESTS,
    DEFAULT_BENCHMARKS,
    DEFAULT_EXAMPLES,
    ConfigurationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildOptions:
    """Validated build options.

    Attributes:
        extension: Source extension to scan, "c" or "cpp"
        compiler: Compiler command written to CC
        binary: Output name of the main program
        standard: Language standard passed as -std=
        opt_level: Optimization flag without the leading dash (e.g., "O2")
        tests: Test files or directories
        benchmarks: Benchmark files or directories
        examples: Example files or directories
        main_file: Project-relative path of the main program's source file
    """

    extension: str
    compiler: str
    binary: str
    standard: str
    opt_level: str
    tests: Tuple[str, ...]
    benchmarks: Tuple[str, ...]
    examples: Tuple[str, ...]
    main_file: str

    @classmethod
    def create(
        cls,
        extension: Optional[str],
        binary: Optional[str],
        compiler: Optional[str] = None,
        standard: Optional[str] = None,
        opt_level: Optional[str] = None,
        tests: Optional[Sequence[str]] = None,
        benchmarks: Optional[Sequence[str]] = None,
        examples: Optional[Sequence[str]] = None,
        main_file: Optional[str] = None,
    ) -> "BuildOptions":
        """Build options from user input, filling extension-dependent defaults.

        Raises:
            ConfigurationError: If the extension is unsupported or a required value is empty
        """
        if not extension:
            raise ConfigurationError("A file extension to search for is required (c or cpp)")

        if extension not in SUPPORTED_EXTENSIONS:
            raise ConfigurationError(f"Only C or C++ files are supported (extension must be one of: {', '.join(SUPPORTED_EXTENSIONS)}; got '{extension}')")

        if not binary:
            raise ConfigurationError("A name for the executable is required")

        opt_level = DEFAULT_OPT_LEVEL if opt_level is None else opt_level.lstrip("-")
        if not opt_level:
            raise ConfigurationError("Optimization level must not be empty")

        options = cls(
            extension=extension,
            compiler=compiler or DEFAULT_COMPILERS[extension],
            binary=binary,
            standard=standard or DEFAULT_STANDARDS[extension],
            opt_level=opt_level,
            tests=tuple(tests) if tests else DEFAULT_TESTS,
            benchmarks=tuple(benchmarks) if benchmarks else DEFAULT_BENCHMARKS,
            examples=tuple(examples) if examples else DEFAULT_EXAMPLES,
            main_file=main_file or f"main.{extension}",
        )
        logger.debug("Build options: %s", options)
        return options
