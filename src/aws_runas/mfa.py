"""Decide which MFA details accompany a credential request."""

import dataclasses
import enum
import logging
from collections.abc import Mapping

from aws_runas.config import Profile
from aws_runas.errors import MissingMfaCode, MissingMfaSerial

logger = logging.getLogger(__name__)

SESSION_TOKEN_VAR = "AWS_SESSION_TOKEN"
MISSING_SERIAL_MESSAGE = "No mfa_serial in selected profile, session will be useless."


class MfaDecision(enum.Enum):
    BYPASSED = "bypassed"
    OPTIONAL = "optional"
    REQUIRED = "required"


@dataclasses.dataclass(frozen=True)
class MfaContext:
    decision: MfaDecision
    serial: str | None = None
    code: str | None = None
    session_token_already_present: bool = False


def session_token_present(environ: Mapping[str, str]) -> bool:
    """Only presence matters; the token value itself is never inspected."""
    return SESSION_TOKEN_VAR in environ


def evaluate(
    profile: Profile,
    env_session_token_present: bool,
    supplied_code: str | None,
) -> MfaContext:
    """
    Work out the MFA serial and code to send with the credential request.

    An existing session token is taken to be MFA-validated already, so both
    serial and code are dropped. Role assumption sends whatever serial the
    profile has. A bare session token is useless without MFA, so the serial
    is mandatory on that path.

    Raises:
        MissingMfaSerial: If a session token is needed and no serial is set.
        MissingMfaCode: If a serial will be sent but no code was supplied.
    """
    if env_session_token_present:
        logger.debug("Existing session token found, skipping MFA")
        return MfaContext(
            decision=MfaDecision.BYPASSED, session_token_already_present=True
        )

    code = (supplied_code or "").strip() or None

    if profile.role_arn:
        decision = MfaDecision.OPTIONAL
    else:
        decision = MfaDecision.REQUIRED
        if not profile.mfa_serial:
            raise MissingMfaSerial(MISSING_SERIAL_MESSAGE)

    if profile.mfa_serial and code is None:
        raise MissingMfaCode(
            f"Profile {profile.name} requires an MFA code for {profile.mfa_serial}"
        )

    return MfaContext(decision=decision, serial=profile.mfa_serial, code=code)
