import argparse
import logging
import os
import sys
from collections.abc import Mapping, Sequence

import click

from aws_runas import __version__
from aws_runas.aws_session import resolve_credentials, sts_client_for
from aws_runas.config import find_config_file, load_profile
from aws_runas.environment import build_environment, format_exports
from aws_runas.errors import RunAsError
from aws_runas.handoff import launch
from aws_runas.mfa import evaluate, session_token_present

logger = logging.getLogger("aws_runas")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aws-runas",
        description="Run a shell or command with temporary AWS credentials",
    )
    parser.add_argument("profile", help="Profile name in the AWS config file")
    parser.add_argument(
        "-m", "--mfa-code", help="Current code from the profile's MFA device"
    )
    parser.add_argument(
        "-p",
        "--path",
        help="Config file to read (default: ./aws_config, then ~/.aws/config)",
    )
    parser.add_argument(
        "-n",
        "--no-role",
        action="store_true",
        help="Request a session token even if the profile has a role_arn",
    )
    parser.add_argument(
        "-d",
        "--duration",
        type=int,
        help="Credential lifetime in seconds (default: profile or 3600)",
    )
    parser.add_argument(
        "-e",
        "--env",
        action="store_true",
        help="Print export statements instead of launching a command",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command and arguments to run (default: $SHELL)",
    )
    return parser


def _configure_logging(verbose: bool, environ: Mapping[str, str]) -> None:
    level = "DEBUG" if verbose else (environ.get("LOG_LEVEL") or "WARNING").upper()
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run(args: argparse.Namespace, environ: Mapping[str, str]) -> None:
    """Resolve credentials for ``args.profile`` and hand off to the target."""
    config_path = find_config_file(args.path, environ)
    profile = load_profile(config_path, args.profile, environ)
    if args.no_role:
        profile = profile.without_role()

    token_present = session_token_present(environ)
    mfa_context = evaluate(profile, token_present, args.mfa_code)

    credentials = resolve_credentials(
        profile,
        mfa_context,
        args.duration,
        sts_client=sts_client_for(profile, config_path, token_present),
        session_name=environ.get("AWS_RUNAS_SESSION_NAME"),
    )
    env_set = build_environment(
        credentials,
        profile.region,
        profile_name=profile.name,
        role_arn=profile.role_arn,
    )

    if args.env:
        click.echo(format_exports(env_set))
        return

    command, *argv = args.command or [None]
    launch(env_set, command, argv, environ=environ)


def main(argv: Sequence[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    environ = dict(os.environ)
    _configure_logging(args.verbose, environ)

    try:
        run(args, environ)
    except RunAsError as exc:
        logger.debug("aws-runas failed", exc_info=True)
        click.secho(f"aws-runas: {exc.stage}: {exc}", fg="red", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
