#
# Copyright 2026 Government Digital Service
#
# SPDX-License-Identifier: MIT
#
"""Temporary credential sessions and the interfaces used to obtain them.

## Overview

A `CredentialSession` holds one set of temporary AWS credentials: an access key
ID, a secret access key, a session token, and the time they expire. Sessions
come in two kinds that share this shape:

Identity session
:  Obtained with the operator's MFA token via the STS GetSessionToken call. It
is tied to the operator, not to any environment.

Environment session
:  Obtained by assuming an environment's role with a valid identity session.
It is tied to both the operator and one context.

The `govukcli.session.manager.SessionManager` decides when each kind must be
refreshed. It talks to the outside world through two interfaces defined here:

`CredentialProvider`
:  Exchanges an MFA token for an identity session, and an identity session for
an environment session. See `govukcli.session.aws` for implementations.

`TokenPrompt`
:  Asks the operator for their current MFA token. `TerminalTokenPrompt` reads it
from the terminal.

## Exceptions

`CredentialExchangeFailed`
:  Raised by providers when either exchange fails. It carries the provider's
exit status so the CLI can exit with it.
"""

import dataclasses
import logging
import sys
from datetime import datetime, timezone

from botocore.utils import parse_timestamp

LOG = logging.getLogger(__name__)

EXPIRY_MARGIN = 300
"""Seconds of remaining lifetime below which a session is treated as expired."""

ENV_VARS = (
    ("access_key_id", "AWS_ACCESS_KEY_ID"),
    ("secret_access_key", "AWS_SECRET_ACCESS_KEY"),
    ("session_token", "AWS_SESSION_TOKEN"),
    ("expiration", "AWS_SESSION_EXPIRATION"),
)
"""Pairs of `CredentialSession` field and exported environment variable name."""


@dataclasses.dataclass(frozen=True)
class CredentialSession:
    """Immutable set of temporary credentials.

    `expiration` is kept as ISO 8601 text, exactly as it is persisted, and is
    only parsed when validity is checked. Empty fields are allowed so a
    partially written session can still be loaded and then rejected by
    `is_valid`.
    """

    access_key_id: str = ""
    secret_access_key: str = ""
    session_token: str = ""
    expiration: str = ""

    @classmethod
    def from_credentials(cls, creds):
        """Build a session from an STS `Credentials` dict.

        boto3 returns `Expiration` as a datetime while the AWS CLI prints it as
        a string. Both are stored as ISO 8601 text.
        """
        expiration = creds.get("Expiration", "")
        if isinstance(expiration, datetime):
            expiration = expiration.isoformat()
        return cls(
            access_key_id=creds.get("AccessKeyId", ""),
            secret_access_key=creds.get("SecretAccessKey", ""),
            session_token=creds.get("SessionToken", ""),
            expiration=str(expiration),
        )

    @classmethod
    def from_env(cls, env):
        """Build a session from a mapping of environment variable names to values."""
        return cls(**{field: env.get(var, "") for field, var in ENV_VARS})

    def to_env(self):
        """Returns a dict of environment variables holding these credentials."""
        return {var: getattr(self, field) for field, var in ENV_VARS}

    def expires_at(self):
        """Returns the expiration as an aware datetime.

        Raises `ValueError` if the stored text is not a timestamp. Timestamps
        without an offset are taken to be UTC.
        """
        if not self.expiration:
            raise ValueError("no expiration")
        expires = parse_timestamp(self.expiration)
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return expires

    def remaining(self, now=None):
        """Returns the seconds left before expiration, negative once expired."""
        now = now or datetime.now(timezone.utc)
        return (self.expires_at() - now).total_seconds()

    def is_valid(self, now=None, margin=EXPIRY_MARGIN):
        """Returns `True` if every field is set and more than `margin` seconds remain."""
        if not all(getattr(self, field) for field, _ in ENV_VARS):
            return False
        try:
            return self.remaining(now) > margin
        except ValueError:
            LOG.debug("unparseable expiration %r", self.expiration)
            return False

    def __repr__(self):
        # Never include the secrets in logs or tracebacks.
        return (
            f"CredentialSession(access_key_id={self.access_key_id!r}, "
            f"expiration={self.expiration!r})"
        )


class CredentialProvider:
    """Exchanges credentials with the identity provider.

    This is an abstract base class and cannot be used directly. Both methods
    return a `CredentialSession` and raise `CredentialExchangeFailed` on error.
    """

    def get_session_token(self, profile, mfa_serial, token_code):
        """Returns an identity session for `profile` authenticated by MFA.

        `mfa_serial` identifies the MFA device and `token_code` is the current
        code it displays.
        """
        raise NotImplementedError

    def assume_role(self, identity, role_arn, session_name):
        """Returns an environment session for `role_arn`.

        The role is assumed using the `identity` session's credentials. The
        `session_name` is recorded by AWS for auditing.
        """
        raise NotImplementedError


class TokenPrompt:
    """Asks the operator for an MFA token.

    This is an abstract base class and cannot be used directly.
    """

    def token(self, mfa_serial, expired=False):
        """Returns the MFA token for `mfa_serial`.

        `expired` is true when a previous identity session existed but has
        lapsed, so the prompt can say so.
        """
        raise NotImplementedError


class TerminalTokenPrompt(TokenPrompt):
    """Prompts on standard error and reads the token from standard input."""

    def __init__(self, out=None, read=None):
        self._out = out
        self._read = read

    def token(self, mfa_serial, expired=False):
        out = self._out or sys.stderr
        if expired:
            print("Your AWS session has expired.", file=out)
        print(f"Enter MFA token for {mfa_serial}: ", end="", flush=True, file=out)
        return (self._read or input)().strip()


class CredentialExchangeFailed(Exception):
    """Raised if the identity provider rejects a credential exchange."""

    def __init__(self, message, exit_status=1):
        super().__init__(message)
        self.exit_status = exit_status
