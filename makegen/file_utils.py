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
"""File and path utilities for scanning a C/C++ project tree."""

import os
import logging
import posixpath
from typing import Iterator

from makegen.constants import SourceReadError

logger = logging.getLogger(__name__)


def is_hidden(name: str) -> bool:
    """Check if a file or directory name is hidden (dot-prefixed)."""
    return name.startswith(".")


def has_extension(path: str, extension: str) -> bool:
    """Check if a path has the given extension.

    Args:
        path: File path
        extension: Extension without the leading dot (e.g., "c")

    Returns:
        True if the path's final suffix equals extension
    """
    return os.path.splitext(path)[1] == f".{extension}"


def strip_extension(path: str) -> str:
    """Remove the final extension from a path ("src/foo.c" -> "src/foo")."""
    return os.path.splitext(path)[0]


def to_project_path(path: str, project_root: str) -> str:
    """Convert a path to the forward-slash project-relative form used as graph keys.

    Args:
        path: Absolute path, or path relative to the current directory
        project_root: Root directory of the project

    Returns:
        Project-relative path separated by "/"
    """
    rel_path = os.path.relpath(path, project_root)
    return rel_path.replace(os.sep, "/")


def normalize_identifier(identifier: str) -> str:
    """Normalize a user supplied path specifier for prefix matching.

    Strips a leading "./", trailing separators and the extension, so that
    "./tests/", "tests" and "tests/foo.c" compare against extension-stripped
    project paths.
    """
    normalized = identifier.replace(os.sep, "/")
    normalized = posixpath.normpath(normalized) if normalized else normalized
    return strip_extension(normalized)


def _raise_scan_error(error: OSError) -> None:
    raise SourceReadError(f"Failed to scan {error.filename}: {error}") from error


def iter_source_files(project_root: str, extension: str) -> Iterator[str]:
    """Yield project-relative paths of regular files with the given extension.

    Hidden files are skipped and hidden directories are not descended into.
    Directory entries are visited in sorted order so that the same tree always
    yields the same sequence.

    Args:
        project_root: Root directory to scan
        extension: Extension without the leading dot (e.g., "cpp")

    Yields:
        Project-relative, forward-slash separated file paths

    Raises:
        SourceReadError: If a directory cannot be listed
    """
    for dirpath, dirnames, filenames in os.walk(project_root, onerror=_raise_scan_error):
        dirnames[:] = sorted(d for d in dirnames if not is_hidden(d))

        for filename in sorted(filenames):
            if is_hidden(filename) or not has_extension(filename, extension):
                continue

            full_path = os.path.join(dirpath, filename)
            if not os.path.isfile(full_path):
                continue

            yield to_project_path(full_path, project_root)


def read_source_file(project_root: str, rel_path: str) -> str:
    """Read a project file as UTF-8 text.

    Args:
        project_root: Root directory of the project
        rel_path: Project-relative path of the file

    Returns:
        File content

    Raises:
        SourceReadError: If the file cannot be opened or is not valid UTF-8
    """
    full_path = os.path.join(project_root, *rel_path.split("/"))
    try:
        with open(full_path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(f"Failed to read {rel_path}: {e}") from e


def escape_path(identifier: str) -> str:
    """Rewrite path separators so the identifier is a valid make variable/target name."""
    return identifier.replace("/", "_")
