import argparse
from typing import List, Optional

CONFIG_HELP = "Path to a YAML configuration file (default: config/application.yml if present)."


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Configures and parses command line arguments for the application.

    Returns:
        argparse.Namespace: An object containing the parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="near-build",
        description="Build NEAR Rust contracts and report compiler diagnostics",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--config", default=None, help=CONFIG_HELP)
    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="Available commands"
    )

    # --- Build Command Arguments ---
    parser_build = subparsers.add_parser(
        "build",
        help="Build a contract for wasm32-unknown-unknown in release mode.",
        description="Runs cargo on the given folder, streams its JSON messages, and reports "
                    "per-file diagnostics, toolchain problems and the produced .wasm artifact."
    )
    parser_build.add_argument(
        "folder",
        help="Root directory of the contract (containing Cargo.toml)."
    )
    parser_build.add_argument(
        "--json",
        action="store_true",
        help="Print the build outcome as JSON instead of a formatted report."
    )

    # --- Verify Command Arguments ---
    parser_verify = subparsers.add_parser(
        "verify",
        help="Check that cargo can be launched.",
        description="Runs `cargo --version` with the configured command and prints build settings."
    )

    # Also accepted after the command; SUPPRESS keeps the global value when omitted
    for subparser in (parser_build, parser_verify):
        subparser.add_argument("--config", default=argparse.SUPPRESS, help=CONFIG_HELP)

    return parser.parse_args(argv)
