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
"""Generate a Makefile for a C or C++ project from its include graph.

PURPOSE:
    Writes a Makefile that compiles every source file of a project into its own
    object file and links each program, test, benchmark and example with
    exactly the object files it needs, so that editing one file only rebuilds
    what depends on it.

WHAT IT DOES:
    - Scans the project for .c or .cpp files (hidden files and directories are skipped)
    - Follows quoted #include directives to build the file dependency graph
    - Pairs every header with its same-stem source file so "foo.c" is linked
      whenever "foo.h" is included
    - Detects link libraries from well-known system headers (math.h -> -lm,
      pthread.h -> -lpthread, ncurses.h -> -lncurses)
    - Sorts files containing main() into binaries, tests, benchmarks and examples

METHOD:
    Include detection is line based: lines starting with #include are read
    literally, without macro expansion or conditional compilation. Quoted
    includes are resolved relative to the including file and must stay inside
    the project root. Any unreadable file or unresolved include aborts the run
    before the Makefile is touched.

REQUIREMENTS:
    - Python 3.8+
    - networkx, colorama, packaging
    - pydot (optional, for --export-graph with .dot)

EXAMPLES:
    # C project whose program is built from main.c
    ./makeGen.py -e c -b myprog

    # C++ project with custom compiler, standard and optimization
    ./makeGen.py -e cpp -b app -c clang++ --std c++17 --opt O2

    # Tests live in two places, the main program is src/app.cpp
    ./makeGen.py -e cpp -b app --tests tests integration/run.cpp --main-file src/app.cpp

    # Preview the Makefile and export the include graph
    ./makeGen.py -e c -b prog --stdout --export-graph deps.graphml
"""
import os
import sys
import argparse
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

# Import library modules
from makegen.color_utils import Colors, print_error, print_info, print_success, print_warning, should_use_color
from makegen.config import BuildOptions
from makegen.constants import (
    DEFAULT_MAKEFILE_NAME,
    DEFAULT_OPT_LEVEL,
    MAKEGEN_VERSION,
    EXIT_SUCCESS,
    EXIT_RUNTIME_ERROR,
    EXIT_KEYBOARD_INTERRUPT,
    MakeGenError,
)
from makegen.dependency_graph import ParseResult, build_dependency_graph
from makegen.export_utils import check_export_format, export_dependency_graph
from makegen.file_utils import normalize_identifier
from makegen.graph_utils import flatten_dependencies
from makegen.makefile_writer import render_makefile, write_makefile
from makegen.partitioning import PartitionedFiles, partition_entry_points

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedMakefile:
    """Everything produced by one generation run.

    Attributes:
        content: Rendered Makefile text
        parse_result: Dependency graph and link libraries
        closures: Transitive closure of every compilable file
        partitioned: Entry points by build category
    """

    content: str
    parse_result: ParseResult
    closures: Dict[str, List[str]]
    partitioned: PartitionedFiles


def generate_makefile(project_root: str, options: BuildOptions) -> GeneratedMakefile:
    """Run the scan -> closure -> partition -> render pipeline.

    Args:
        project_root: Root directory of the C/C++ project
        options: Validated build options

    Returns:
        GeneratedMakefile; nothing is written to disk

    Raises:
        MakeGenError: On any read, parse, resolution or configuration failure
    """
    parse_result = build_dependency_graph(project_root, options.extension)
    closures = flatten_dependencies(parse_result.graph, options.extension)
    partitioned = partition_entry_points(parse_result.graph, options.extension, options.tests, options.benchmarks, options.examples)
    content = render_makefile(options, parse_result.graph, closures, partitioned, parse_result.libraries)

    return GeneratedMakefile(content=content, parse_result=parse_result, closures=closures, partitioned=partitioned)


def print_summary(result: GeneratedMakefile, output_path: str) -> None:
    """Print a short summary of the generated Makefile."""
    partitioned = result.partitioned
    libraries = " ".join(f"-l{library}" for library in result.parse_result.libraries) or "none"

    print_success(f"Generated {output_path}")
    print(f"  {Colors.DIM}Files in graph:{Colors.RESET} {Colors.CYAN}{len(result.parse_result.graph)}{Colors.RESET}")
    print(f"  {Colors.DIM}Object files:{Colors.RESET}   {Colors.CYAN}{len(result.closures)}{Colors.RESET}")
    print(f"  {Colors.DIM}Binaries:{Colors.RESET}       {Colors.CYAN}{len(partitioned.standalone)}{Colors.RESET}")
    for category, identifiers in partitioned.categories():
        if identifiers:
            print(f"  {Colors.DIM}{category.capitalize() + ':':<15}{Colors.RESET} {Colors.CYAN}{len(identifiers)}{Colors.RESET}")
    print(f"  {Colors.DIM}Link libraries:{Colors.RESET} {libraries}")


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="makeGen.py",
        description="Generate C/C++ makefiles quickly and easily!",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -e c -b myprog
  %(prog)s -e cpp -b app -c clang++ --std c++17 --opt O2
  %(prog)s -e cpp -b app --tests tests integration/run.cpp --main-file src/app.cpp
  %(prog)s -e c -b prog --stdout --export-graph deps.graphml
        """,
    )

    parser.add_argument("-e", "--extension", metavar="EXTENSION", help="Source extension to look for, required: c for C files, cpp for C++ files")
    parser.add_argument("-b", "--binary", metavar="PROGRAM_NAME", help="Name of the executable built from the main source file, required")
    parser.add_argument("-c", "--compiler", metavar="COMPILER", help="Compiler to use (default: gcc for c, g++ for cpp)")
    parser.add_argument("--std", metavar="STANDARD", help="Language standard (default: c99 for c, c++11 for cpp)")
    parser.add_argument("--opt", metavar="OPTIMIZATION_LEVEL", help=f"Optimization flag without the dash (default: {DEFAULT_OPT_LEVEL})")
    parser.add_argument("--tests", nargs="+", metavar="PATH", help="Test files or directories containing files with main() (default: tests)")
    parser.add_argument("--benchmarks", nargs="+", metavar="PATH", help="Benchmark files or directories containing files with main() (default: benchmarks)")
    parser.add_argument("--examples", nargs="+", metavar="PATH", help="Example files or directories containing files with main() (default: examples)")
    parser.add_argument("--main-file", metavar="MAIN_SOURCE_FILE", help="Source file linked into PROGRAM_NAME (default: main.c / main.cpp)")
    parser.add_argument("--root", default=os.curdir, metavar="DIR", help="Project root to scan (default: current directory)")
    parser.add_argument("-o", "--output", default=DEFAULT_MAKEFILE_NAME, metavar="FILE", help=f"Makefile to write, relative to the project root (default: {DEFAULT_MAKEFILE_NAME})")
    parser.add_argument("--stdout", action="store_true", help="Print the Makefile instead of writing it")
    parser.add_argument("--export-graph", metavar="FILE", help="Export the include graph (.graphml, .gexf, .json, .dot)")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"makegen {MAKEGEN_VERSION}")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    options = BuildOptions.create(
        extension=args.extension,
        binary=args.binary,
        compiler=args.compiler,
        standard=args.std,
        opt_level=args.opt,
        tests=args.tests,
        benchmarks=args.benchmarks,
        examples=args.examples,
        main_file=args.main_file,
    )

    if args.export_graph:
        check_export_format(args.export_graph)

    logger.info("Scanning %s for .%s files...", os.path.abspath(args.root), options.extension)
    result = generate_makefile(args.root, options)

    if normalize_identifier(options.main_file) not in result.partitioned.standalone:
        print_warning(f"No standalone entry point matches main file '{options.main_file}'; '{options.binary}' will not be built")

    if args.stdout:
        sys.stdout.write(result.content)
    else:
        output_path = args.output if os.path.isabs(args.output) else os.path.join(args.root, args.output)
        write_makefile(output_path, result.content)
        print_summary(result, output_path)

    if args.export_graph:
        exported = export_dependency_graph(args.export_graph, result.parse_result.graph, result.partitioned)
        print_info(f"Exported include graph to {exported}")

    return EXIT_SUCCESS


def cli() -> None:
    """Console entry point: run main() and map errors to exit codes."""
    try:
        exit_code = main()
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.warning("\nInterrupted by user")
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except MakeGenError as e:
        logger.debug("Aborting", exc_info=True)
        print_error(str(e))
        sys.exit(e.exit_code)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        if logging.getLogger().level == logging.DEBUG:
            import traceback

            traceback.print_exc()
        sys.exit(EXIT_RUNTIME_ERROR)


if __name__ == "__main__":
    cli()
