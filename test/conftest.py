#!/usr/bin/env python3
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#*
#* Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
#*
#* 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
#* 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
#*    documentation and/or other materials provided with the distribution.
#* 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
#*    software without specific prior written permission.
#*
#* THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
#* THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
#* CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
#* PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
#* LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
#* EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#****************************************************************************************************************************************************
"""Pytest configuration and shared fixtures for makegen tests.

Projects are written into a fresh temporary directory per test. The
make_project fixture takes a mapping of project-relative paths to file
contents and returns the project root.
"""

import os
import sys
import tempfile
import shutil
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from makegen.color_utils import Colors  # noqa: E402


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests.

    Scope: function (default)
    Use for: File I/O operations that need isolation
    """
    tmpdir = tempfile.mkdtemp(prefix="makegen_test_")
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def make_project(temp_dir: str) -> Callable[[Dict[str, str]], str]:
    """Factory writing a C/C++ project tree into temp_dir.

    Dependencies: temp_dir
    Use for: Anything that scans a project from disk
    """

    def _make(files: Dict[str, str]) -> str:
        for rel_path, content in files.items():
            full_path = os.path.join(temp_dir, *rel_path.split("/"))
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "w", encoding="utf-8") as f:
                f.write(content)
        return temp_dir

    return _make


@pytest.fixture
def simple_c_project(make_project: Callable[[Dict[str, str]], str]) -> str:
    """Program main.c using util.c through util.h, linked against libm."""
    return make_project(
        {
            "main.c": '#include <stdio.h>\n#include <math.h>\n#include "util.h"\n\nint main(void) { return util(); }\n',
            "util.h": "int util(void);\n",
            "util.c": '#include "util.h"\n\nint util(void) { return 0; }\n',
        }
    )


@pytest.fixture
def categorized_c_project(make_project: Callable[[Dict[str, str]], str]) -> str:
    """Project with a main program, a second tool, a test, a benchmark and an example."""
    return make_project(
        {
            "main.c": '#include "lib/core.h"\nint main(void) { return core(); }\n',
            "tool.c": '#include <pthread.h>\nint main(void) { return 0; }\n',
            "lib/core.h": '#include "detail.h"\nint core(void);\n',
            "lib/core.c": '#include "core.h"\nint core(void) { return detail(); }\n',
            "lib/detail.h": "int detail(void);\n",
            "lib/detail.c": '#include "detail.h"\n#include <math.h>\nint detail(void) { return 0; }\n',
            "tests/test_core.c": '#include "../lib/core.h"\nint main(void) { return core(); }\n',
            "benchmarks/bench_core.c": '#include "../lib/core.h"\nint main(void) { return core(); }\n',
            "examples/demo.c": "int main(void) { return 0; }\n",
        }
    )


@pytest.fixture(autouse=True)
def restore_colors() -> Generator[None, None, None]:
    """Undo Colors.disable() calls made by a test."""
    saved = {name: value for name, value in vars(Colors).items() if not name.startswith("_") and isinstance(value, str)}
    yield
    for name, value in saved.items():
        setattr(Colors, name, value)
