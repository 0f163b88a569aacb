"""Map temporary credentials onto the conventional AWS environment variables."""

import datetime
import shlex

from aws_runas.aws_session import Credentials


def _iso_utc(value: datetime.datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_environment(
    credentials: Credentials,
    region: str | None = None,
    *,
    profile_name: str | None = None,
    role_arn: str | None = None,
) -> dict[str, str]:
    """Return the variables to export; unset values are left out entirely."""
    candidates = [
        ("AWS_ACCESS_KEY_ID", credentials.access_key_id),
        ("AWS_SECRET_ACCESS_KEY", credentials.secret_access_key),
        ("AWS_SESSION_TOKEN", credentials.session_token),
        ("AWS_DEFAULT_REGION", region),
        ("AWS_REGION", region),
        (
            "AWS_SESSION_EXPIRATION",
            _iso_utc(credentials.expiration) if credentials.expiration else None,
        ),
        ("AWS_RUNAS_PROFILE", profile_name),
        ("AWS_RUNAS_ASSUMED_ROLE_ARN", role_arn),
    ]
    return {name: value for name, value in candidates if value}


def format_exports(env_set: dict[str, str]) -> str:
    return "\n".join(
        f"export {name}={shlex.quote(value)}" for name, value in env_set.items()
    )
