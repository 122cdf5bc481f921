"""CLI entrypoint for agent-credtoolkit."""
import sys
import argparse
import logging
from pathlib import Path

from .validators import validate_profile_name, validate_project_id

VERSION = "0.1.0"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def cmd_version(args):
    """Show version information."""
    print(f"agent-credtoolkit {VERSION}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from agent_credtoolkit.credentials.domains.preferences import set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference("config_path", str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path."""
    from agent_credtoolkit.credentials.domains.config_loader import default_config_path
    from agent_credtoolkit.credentials.domains.preferences import get_preference

    config_path_pref = get_preference("config_path")

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        if default_config.exists():
            print("Source: default")
        else:
            print("Source: default (file not found)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from agent_credtoolkit.credentials.domains.config_loader import default_config_path
    from agent_credtoolkit.credentials.domains.preferences import clear_preference

    clear_preference("config_path")
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def cmd_credentials_resolve(args):
    """Resolve credentials from explicit values or the discovery chain."""
    from agent_credtoolkit.credentials.domains.errors import CredentialsUnavailable
    from agent_credtoolkit.credentials.domains.sources import StaticCredentialSource
    from agent_credtoolkit.credentials.workflows.default_chain import default_credential_chain
    from agent_credtoolkit.credentials.workflows.selection import select

    if args.profile is not None:
        validate_profile_name(args.profile)
    if args.project_id is not None:
        validate_project_id(args.project_id)

    source = select(
        lambda: args.identifier,
        lambda: args.secret,
        default_credential_chain(profile=args.profile, project_id=args.project_id),
    )
    logger.debug(f"Selected credential source: {source!r}")

    try:
        pair = source.resolve()
    except CredentialsUnavailable as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.quiet:
        # Quiet mode: identifier (and secret if requested) only, one per line
        print(pair.identifier)
        if args.show_secret:
            print(pair.secret)
    else:
        origin = "explicit" if isinstance(source, StaticCredentialSource) else "discovery chain"
        print(f"Identifier: {pair.identifier}")
        print(f"Secret: {pair.secret if args.show_secret else '********'}")
        print(f"Source: {origin}")
    sys.exit(0)


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (credentials unavailable, config errors, etc.)
        2 - Usage errors (invalid arguments, invalid profile name, etc.)
    """
    parser = argparse.ArgumentParser(
        prog="credtoolkit",
        description="Agent-credtoolkit CLI - resolve credentials from explicit values, environment, config or GCP Secret Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (credentials unavailable, config error, etc.)
  2 - Usage error (invalid arguments, invalid profile name, etc.)

Environment variables:
  CREDTOOLKIT_IDENTIFIER / CREDTOOLKIT_SECRET - credentials read by the discovery chain
  CREDTOOLKIT_PROFILE - config profile name (default: "default")
  GCP_PROJECT - GCP project ID (overrides config file)

Configuration:
  Default location: ~/.config/agent-credtoolkit/config.yml
  Custom path: Set with 'credtoolkit config set-path <path>'
  View current: Run 'credtoolkit config show'
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of agent-credtoolkit"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage agent-credtoolkit configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="""
Set the configuration file path preference.

This stores the absolute path to your config file in:
~/.config/agent-credtoolkit/preferences.json
        """
    )
    config_set_path_parser.add_argument(
        "path",
        help="Path to config file"
    )

    config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="Display the current configuration file path and its source (preference or default)"
    )

    config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference and fall back to ~/.config/agent-credtoolkit/config.yml"
    )

    # credentials command
    credentials_parser = subparsers.add_parser(
        "credentials",
        help="Credential operations",
        description="Resolve credentials"
    )
    credentials_subparsers = credentials_parser.add_subparsers(dest="credentials_command")

    resolve_parser = credentials_subparsers.add_parser(
        "resolve",
        help="Resolve a credential pair",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Resolve a credential pair.

Behavior:
  1. If both --identifier and --secret are given and non-blank, they are used as-is
  2. Otherwise the discovery chain is tried in order:
     environment variables, config file profile, GCP Secret Manager

A single explicit value is ignored; it is never combined with discovered values.
The secret is masked unless --show-secret is given.

Exit codes:
  0 - Credentials resolved and printed
  1 - No source could supply credentials
  2 - Invalid arguments
        """
    )
    resolve_parser.add_argument("--identifier", help="Explicit identifier")
    resolve_parser.add_argument("--secret", help="Explicit secret")
    resolve_parser.add_argument(
        "--profile",
        help="Config profile to use (overrides CREDTOOLKIT_PROFILE)"
    )
    resolve_parser.add_argument(
        "--project-id",
        help="GCP project ID (auto-detected from GCP_PROJECT env var or config file if not provided)"
    )
    resolve_parser.add_argument(
        "--show-secret",
        action="store_true",
        help="Print the secret instead of a mask"
    )
    resolve_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Output only the values, no labels (useful for scripts)"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "config":
            if args.config_command == "set-path":
                cmd_config_set_path(args)
            elif args.config_command == "show":
                cmd_config_show(args)
            elif args.config_command == "clear":
                cmd_config_clear(args)
            else:
                config_parser.print_help()
                sys.exit(2)
        elif args.command == "credentials":
            if args.credentials_command == "resolve":
                cmd_credentials_resolve(args)
            else:
                credentials_parser.print_help()
                sys.exit(2)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
