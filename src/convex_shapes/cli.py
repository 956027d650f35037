"""convex-shapes CLI: extract the schema/function descriptor document."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Log to stderr; stdout carries only the document."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main():
    """Main CLI entry point: SCHEMA [FUNCTION ...] -> JSON document on stdout."""
    # Get version for --version argument (handle PackageNotFoundError)
    try:
        package_version = get_version("convex-shapes")
    except PackageNotFoundError:
        package_version = "dev"

    parser = argparse.ArgumentParser(
        prog="convex-shapes",
        description="Extract table and function shapes from Convex schema modules as JSON"
    )
    parser.add_argument("--version", action="version", version=f"convex-shapes {package_version}")
    parser.add_argument(
        "schema_path",
        type=Path,
        help="Path to the schema module (calls define_schema)"
    )
    parser.add_argument(
        "function_paths",
        type=Path,
        nargs="*",
        help="Paths to function modules, extracted in the given order"
    )
    parser.add_argument(
        "--helper-stub",
        dest="helper_stubs",
        action="append",
        default=[],
        metavar="PATTERN=PATH",
        help="Serve PATH for imports whose module name matches PATTERN (after TYPEGEN_HELPER_STUBS rules)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log module loads and extraction counts to stderr."
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )

    args = parser.parse_args()
    _configure_logging(args.verbose, args.quiet)

    # Lazy import: keep --help/--version free of pydantic model construction
    from ._internal.config import load_helper_stubs, parse_stub_options
    from .api import extract, write_document
    from .errors import ExtractionError, InterceptionConfigError

    try:
        stubs = load_helper_stubs().merged(parse_stub_options(args.helper_stubs))
        document = extract(args.schema_path, args.function_paths, helper_stubs=stubs)
    except (ExtractionError, InterceptionConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    write_document(document)


if __name__ == "__main__":
    main()
