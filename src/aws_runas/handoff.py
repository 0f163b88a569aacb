"""Replace the current process with a shell or command carrying credentials."""

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from aws_runas.errors import LaunchFailed

logger = logging.getLogger(__name__)

DEFAULT_SHELL = "/bin/sh"

# Inherited values that would override or mix with the new credentials.
STALE_VARIABLES = (
    "AWS_PROFILE",
    "AWS_DEFAULT_PROFILE",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
    "AWS_SECURITY_TOKEN",
    "AWS_SESSION_EXPIRATION",
    "AWS_RUNAS_PROFILE",
    "AWS_RUNAS_ASSUMED_ROLE_ARN",
)


def resolve_shell(environ: Mapping[str, str]) -> str:
    return (environ.get("SHELL") or "").strip() or DEFAULT_SHELL


def launch(
    env_set: Mapping[str, str],
    command: str | None = None,
    argv: Sequence[str] = (),
    *,
    environ: Mapping[str, str],
    execve: Callable[[str, list[str], dict[str, str]], Any] = os.execvpe,
) -> None:
    """
    Exec ``command`` (or the user's shell) with ``env_set`` layered on ``environ``.

    Credential and profile variables already in ``environ`` are dropped
    first, so only ``env_set`` supplies them. Without a command the shell
    from ``SHELL`` starts with no arguments. On success this never returns;
    the process image is replaced.

    Raises:
        LaunchFailed: If the target cannot be located or executed.
    """
    env = {k: v for k, v in environ.items() if k not in STALE_VARIABLES}
    env.update(env_set)

    if command:
        program, args = command, list(argv)
    else:
        program, args = resolve_shell(environ), []

    logger.debug("Handing off to %s %s", program, " ".join(args))
    try:
        execve(program, [program, *args], env)
    except OSError as exc:
        raise LaunchFailed(f"Unable to execute {program}: {exc}") from exc
