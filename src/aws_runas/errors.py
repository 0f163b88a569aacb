"""Error taxonomy for credential resolution and handoff."""


class RunAsError(Exception):
    """Base class for every failure that ends an aws-runas invocation."""

    stage = "runas"


class ConfigNotFound(RunAsError):
    """Raised when no configuration file can be located."""

    stage = "config"


class ProfileNotFound(RunAsError):
    """Raised when the requested profile (or its source profile) is missing."""

    stage = "config"


class ConfigError(RunAsError):
    """Raised when a profile carries a value that cannot be used."""

    stage = "config"


class MissingMfaSerial(RunAsError):
    """Raised when a session token is requested without an MFA device."""

    stage = "mfa"


class MissingMfaCode(RunAsError):
    """Raised when an MFA device is configured but no code was supplied."""

    stage = "mfa"


class CredentialRequestFailed(RunAsError):
    """Raised when STS rejects or fails a credential request."""

    stage = "sts"


class LaunchFailed(RunAsError):
    """Raised when the target command or shell cannot be executed."""

    stage = "launch"
