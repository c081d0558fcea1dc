# SPDX-License-Identifier: MIT
"""Command-line interface for mkgen."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from mkgen.configure.loader import DEFAULT_PROJECT_FILE, load_project
from mkgen.configure.platform import PlatformContext
from mkgen.core.errors import MkgenError
from mkgen.generators.make import MakefileGenerator, makefile_name

# Set up logging
logger = logging.getLogger("mkgen")

_TRUE_VALUES = ("1", "true", "yes", "on")


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def parse_variables(args: list[str]) -> tuple[dict[str, str], list[str]]:
    """Parse KEY=value arguments from a list.

    Args:
        args: List of arguments.

    Returns:
        Tuple of (variables dict, remaining args).
    """
    variables: dict[str, str] = {}
    remaining: list[str] = []

    for arg in args:
        if "=" in arg and not arg.startswith("-"):
            key, _, value = arg.partition("=")
            if key:  # Valid KEY=value
                variables[key] = value
            else:
                remaining.append(arg)
        else:
            remaining.append(arg)

    return variables, remaining


def platform_from_args(args: argparse.Namespace) -> PlatformContext:
    """Build the platform context from options, variables and the host.

    Precedence: --os/--cc/--verbose-make, then MKGEN_OS/MKGEN_CC/
    MKGEN_VERBOSE (command line KEY=value or environment), then the host.
    """
    from mkgen import get_var

    os_name = getattr(args, "os", None) or get_var("MKGEN_OS")
    toolchain = getattr(args, "cc", None) or get_var("MKGEN_CC")
    verbose = getattr(args, "verbose_make", False) or (
        (get_var("MKGEN_VERBOSE") or "").lower() in _TRUE_VALUES
    )
    return PlatformContext.create(os_name=os_name, toolchain=toolchain, verbose=verbose)


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate one makefile per package of the project file."""
    from mkgen import set_cli_vars

    setup_logging(args.verbose, args.debug)

    variables, remaining = parse_variables(getattr(args, "extra", []))
    if remaining:
        logger.error("Unexpected arguments: %s", " ".join(remaining))
        return 1
    set_cli_vars(variables)

    try:
        project = load_project(args.file)
        generator = MakefileGenerator(platform_from_args(args))
        if args.output_dir:
            output_dir = Path(args.output_dir)
        else:
            output_dir = Path(args.file).parent
        written = generator.generate(project, output_dir)
    except MkgenError as e:
        logger.error("%s", e)
        return 1

    for path in written:
        print(path)
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Show the packages of the project file."""
    setup_logging(args.verbose, args.debug)

    try:
        project = load_project(args.file)
    except MkgenError as e:
        logger.error("%s", e)
        return 1

    print(f"Project: {project.name}")
    for package in project:
        print(f"  {package.name} ({package.language} {package.kind.description})")
        print(f"    makefile: {makefile_name(project, package)}")
        print(f"    configurations: {', '.join(package.config_names)}")
        if package.links:
            print(f"    links: {', '.join(ref.name for ref in package.links)}")
    return 0


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument(
        "-f",
        "--file",
        default=DEFAULT_PROJECT_FILE,
        help=f"Project file (default: {DEFAULT_PROJECT_FILE})",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the mkgen CLI."""
    parser = argparse.ArgumentParser(
        prog="mkgen",
        description="Generate GNU makefiles for C and C++ projects.",
        epilog="Run 'mkgen <command> --help' for command-specific help.",
    )
    from mkgen import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # mkgen generate
    gen_parser = subparsers.add_parser(
        "generate", help="Generate makefiles from the project file"
    )
    add_common_args(gen_parser)
    gen_parser.add_argument(
        "-o",
        "--output-dir",
        help="Directory package paths are relative to (default: project file dir)",
    )
    gen_parser.add_argument("--os", help="Target OS: windows, macosx, linux, ...")
    gen_parser.add_argument("--cc", help="Toolchain: gcc, clang, dmc, ...")
    gen_parser.add_argument(
        "--verbose-make",
        action="store_true",
        help="Make the generated makefiles echo full command lines",
    )
    gen_parser.add_argument(
        "extra",
        nargs="*",
        help="Generation variables (KEY=value)",
    )
    gen_parser.set_defaults(func=cmd_generate)

    # mkgen info
    info_parser = subparsers.add_parser("info", help="Show the project's packages")
    add_common_args(info_parser)
    info_parser.set_defaults(func=cmd_info)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
