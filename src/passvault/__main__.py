# Main Entry Point
#
# python -m passvault serve      run the API server
# python -m passvault generate   print a random credential and its strength
# python -m passvault strength   score a credential

import argparse
import sys

from . import __version__
from .vault import ConfigurationError, CredentialGenerator, StrengthScorer


def _print_report(credential: str) -> None:
    report = StrengthScorer.score(credential)
    print(f"Strength: {report.category.label} (score {report.score})")
    for hint in report.feedback:
        print(f"  - {hint}")


def cmd_serve(args: argparse.Namespace) -> int:
    from .api.main import start_api_server
    from .config import load_settings

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    host = args.host or settings.host
    port = args.port or settings.port
    print(f"Starting passvault API on {host}:{port} (Ctrl+C to stop)")
    try:
        start_api_server(host=host, port=port, settings=settings)
    except KeyboardInterrupt:
        print("\nShutting down...")
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    try:
        credential = CredentialGenerator().generate(
            length=args.length,
            use_upper=not args.no_upper,
            use_lower=not args.no_lower,
            use_digits=not args.no_digits,
            use_symbols=not args.no_symbols,
            exclude_ambiguous=not args.allow_ambiguous,
        )
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(credential)
    if not args.quiet:
        _print_report(credential)
    return 0


def cmd_strength(args: argparse.Namespace) -> int:
    _print_report(args.credential)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="passvault",
        description="passvault - encrypted credential vault",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"passvault v{__version__}",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default=None, help="Bind host (default: PASSVAULT_HOST or 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PASSVAULT_PORT or 8000)")
    serve.set_defaults(func=cmd_serve)

    generate = sub.add_parser("generate", help="Generate a random credential")
    generate.add_argument("--length", type=int, default=16, help="Credential length (default: 16)")
    generate.add_argument("--no-upper", action="store_true", help="Leave out uppercase letters")
    generate.add_argument("--no-lower", action="store_true", help="Leave out lowercase letters")
    generate.add_argument("--no-digits", action="store_true", help="Leave out digits")
    generate.add_argument("--no-symbols", action="store_true", help="Leave out symbols")
    generate.add_argument("--allow-ambiguous", action="store_true", help="Keep I, L, l, o, 1, 0")
    generate.add_argument("-q", "--quiet", action="store_true", help="Print only the credential")
    generate.set_defaults(func=cmd_generate)

    strength = sub.add_parser("strength", help="Score a credential")
    strength.add_argument("credential", help="Credential to score")
    strength.set_defaults(func=cmd_strength)

    return parser


def main(argv=None) -> int:
    """Main entry point for passvault."""
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
