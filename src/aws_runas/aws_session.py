"""STS credential requests via role assumption or session tokens."""

import dataclasses
import datetime
import logging
import time
from pathlib import Path
from typing import Any

import boto3
import botocore.exceptions
import botocore.session
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from aws_runas.config import Profile
from aws_runas.errors import CredentialRequestFailed, ProfileNotFound
from aws_runas.mfa import MfaContext

logger = logging.getLogger(__name__)

DEFAULT_DURATION_SECONDS = 3600
SESSION_NAME_PREFIX = "aws-runas-session"

# total_max_attempts includes the first request; 1 means no retries.
STS_CLIENT_CONFIG = Config(retries={"total_max_attempts": 1})


@dataclasses.dataclass(frozen=True)
class Credentials:
    access_key_id: str
    secret_access_key: str
    session_token: str | None = None
    expiration: datetime.datetime | None = None


def default_session_name() -> str:
    return f"{SESSION_NAME_PREFIX}_{int(time.time())}"


def sts_client_for(
    profile: Profile,
    config_path: Path | None,
    env_session_token_present: bool,
) -> Any:
    """
    Build the STS client that issues the temporary credentials.

    The base credentials come from the profile's source_profile (or the
    profile itself) in ``config_path``. With a session token already in the
    environment the default credential chain is used, so the existing
    session signs the request.
    """
    core = botocore.session.get_session()
    if config_path is not None:
        core.set_config_variable("config_file", str(config_path))

    base_profile = None
    if not env_session_token_present:
        base_profile = profile.source_profile or profile.name
        logger.debug("Signing STS request with profile %s", base_profile)

    try:
        session = boto3.session.Session(
            botocore_session=core,
            profile_name=base_profile,
            region_name=profile.region,
        )
        return session.client("sts", config=STS_CLIENT_CONFIG)
    except botocore.exceptions.ProfileNotFound as exc:
        # botocore only reads "[profile NAME]" sections from the config file
        raise ProfileNotFound(
            f"Profile {base_profile} has no credentials botocore can use: {exc}"
        ) from exc
    except BotoCoreError as exc:
        raise CredentialRequestFailed(
            f"Unable to create STS client for profile {profile.name}: {exc}"
        ) from exc


def _mfa_params(mfa_context: MfaContext) -> dict[str, str]:
    params = {}
    if mfa_context.serial:
        params["SerialNumber"] = mfa_context.serial
    if mfa_context.code:
        params["TokenCode"] = mfa_context.code
    return params


def _to_credentials(response: dict[str, Any], operation: str) -> Credentials:
    credentials = response.get("Credentials")
    if not credentials:
        raise CredentialRequestFailed(f"{operation} response missing credentials")

    return Credentials(
        access_key_id=credentials.get("AccessKeyId"),
        secret_access_key=credentials.get("SecretAccessKey"),
        session_token=credentials.get("SessionToken"),
        expiration=credentials.get("Expiration"),
    )


def resolve_credentials(
    profile: Profile,
    mfa_context: MfaContext,
    duration_seconds: int | None = None,
    *,
    sts_client: Any = None,
    session_name: str | None = None,
) -> Credentials:
    """
    Request temporary credentials for ``profile``.

    Profiles with a role_arn always go through AssumeRole; everything else
    asks for a session token. A single request is made: MFA codes are
    single-use, so failures are reported rather than retried.

    Returns:
        The temporary credentials issued by STS.

    Raises:
        CredentialRequestFailed: If STS rejects the request or the response
            carries no credentials.
    """
    duration = duration_seconds or profile.duration_seconds or DEFAULT_DURATION_SECONDS
    if sts_client is None:
        sts_client = sts_client_for(
            profile, None, mfa_context.session_token_already_present
        )
    mfa_params = _mfa_params(mfa_context)

    if profile.role_arn:
        role_session_name = (session_name or "").strip() or default_session_name()
        logger.info(
            "Assuming role %s as %s for %ss",
            profile.role_arn,
            role_session_name,
            duration,
        )
        try:
            response = sts_client.assume_role(
                RoleArn=profile.role_arn,
                RoleSessionName=role_session_name,
                DurationSeconds=duration,
                **mfa_params,
            )
        except (BotoCoreError, ClientError) as exc:
            raise CredentialRequestFailed(
                f"Unable to assume role {profile.role_arn}: {exc}"
            ) from exc
        return _to_credentials(response, "AssumeRole")

    logger.info("Requesting session token for %s for %ss", profile.name, duration)
    try:
        response = sts_client.get_session_token(DurationSeconds=duration, **mfa_params)
    except (BotoCoreError, ClientError) as exc:
        raise CredentialRequestFailed(
            f"Unable to get session token for profile {profile.name}: {exc}"
        ) from exc
    return _to_credentials(response, "GetSessionToken")
