"""Locate the AWS config file and load a named profile from it."""

import configparser
import dataclasses
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from aws_runas.errors import ConfigError, ConfigNotFound, ProfileNotFound

logger = logging.getLogger(__name__)

LOCAL_CONFIG_NAME = "aws_config"

# Fields a profile takes from its source_profile when not set locally.
INHERITED_FIELDS = ("region", "mfa_serial", "duration_seconds")


@dataclasses.dataclass(frozen=True)
class Profile:
    """Settings of a single profile section, after source_profile inheritance."""

    name: str
    role_arn: str | None = None
    mfa_serial: str | None = None
    source_profile: str | None = None
    region: str | None = None
    duration_seconds: int | None = None

    def without_role(self) -> "Profile":
        return dataclasses.replace(self, role_arn=None)


def default_config_path(environ: Mapping[str, str]) -> Path:
    override = (environ.get("AWS_CONFIG_FILE") or "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".aws" / "config"


def find_config_file(
    path_override: str | os.PathLike | None,
    environ: Mapping[str, str],
    cwd: Path | None = None,
) -> Path:
    """
    Pick the config file to read.

    An explicit path wins and must exist. Otherwise ``aws_config`` in the
    working directory is preferred over the per-user AWS config file.

    Raises:
        ConfigNotFound: If none of the candidates exist.
    """
    if path_override:
        explicit = Path(path_override).expanduser()
        if not explicit.is_file():
            raise ConfigNotFound(f"Config file {explicit} does not exist")
        return explicit

    candidates = [
        (cwd or Path.cwd()) / LOCAL_CONFIG_NAME,
        default_config_path(environ),
    ]
    for candidate in candidates:
        if candidate.is_file():
            logger.debug("Using config file %s", candidate)
            return candidate

    searched = ", ".join(str(c) for c in candidates)
    raise ConfigNotFound(f"No AWS config file found (searched {searched})")


def _read_config(path: Path) -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    try:
        with open(path, encoding="utf-8") as handle:
            parser.read_file(handle)
    except configparser.Error as exc:
        raise ConfigError(f"Unable to parse {path}: {exc}") from exc
    return parser


def _find_section(
    parser: configparser.ConfigParser, name: str
) -> configparser.SectionProxy | None:
    # ~/.aws/config uses "[profile NAME]", except for "[default]"
    for section in (f"profile {name}", name):
        if parser.has_section(section):
            return parser[section]
    return None


def _value(section: configparser.SectionProxy, key: str) -> str | None:
    value = (section.get(key) or "").strip()
    return value or None


def _duration(section: configparser.SectionProxy, profile_name: str) -> int | None:
    raw = _value(section, "duration_seconds")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(
            f"duration_seconds for profile {profile_name} is not an integer: {raw!r}"
        ) from exc


def _section_fields(
    section: configparser.SectionProxy, profile_name: str
) -> dict[str, object]:
    return {
        "role_arn": _value(section, "role_arn"),
        "mfa_serial": _value(section, "mfa_serial"),
        "source_profile": _value(section, "source_profile"),
        "region": _value(section, "region"),
        "duration_seconds": _duration(section, profile_name),
    }


def load_profile(
    path_override: str | os.PathLike | None,
    profile_name: str,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> Profile:
    """
    Load ``profile_name`` from the applicable config file.

    When the profile names a ``source_profile``, fields it leaves unset
    (region, MFA serial, duration) are taken from that section. The lookup
    is a single step; the source profile's own source_profile is ignored,
    and a source missing from this file contributes nothing.

    Raises:
        ConfigNotFound: If no config file can be located.
        ProfileNotFound: If the profile is absent.
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    environ = os.environ if environ is None else environ
    path = find_config_file(path_override, environ, cwd=cwd)
    parser = _read_config(path)

    section = _find_section(parser, profile_name)
    if section is None:
        raise ProfileNotFound(f"Profile {profile_name} not found in {path}")
    fields = _section_fields(section, profile_name)

    source_name = fields["source_profile"]
    if source_name:
        source = _find_section(parser, source_name)
        if source is None:
            # Source may live only in the shared credentials file
            logger.debug(
                "Source profile %s not in %s, nothing to inherit", source_name, path
            )
        else:
            inherited = _section_fields(source, source_name)
            for field in INHERITED_FIELDS:
                if fields[field] is None:
                    fields[field] = inherited[field]

    profile = Profile(name=profile_name, **fields)
    logger.debug(
        "Loaded profile %s (role=%s, mfa=%s, region=%s)",
        profile.name,
        profile.role_arn,
        profile.mfa_serial,
        profile.region,
    )
    return profile
