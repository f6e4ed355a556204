#
# Copyright 2026 Government Digital Service
#
# SPDX-License-Identifier: MIT
#
"""Hands out temporary AWS credentials for a context.

## Overview

`SessionManager.acquire` returns a `govukcli.session.CredentialSession` for a
context, doing as little work as possible:

1. If the cached environment session for the context is still fresh, it is
   returned as is. No network calls, no prompts, no writes.

2. Otherwise the cached identity session is checked. If it has lapsed, the
   operator is prompted for an MFA token, which is exchanged for a new identity
   session that is cached.

3. The environment's role is assumed with the identity session, and the new
   environment session is cached and returned.

A session is fresh when all of its fields are set and more than `margin`
seconds (300 by default) remain before it expires. Stale sessions are bypassed,
never deleted, and are overwritten the next time their slot is refreshed.

The manager is assembled from injected collaborators, so tests can supply
in-memory stores, a fake provider, and a scripted prompt:

    manager = SessionManager(
        contexts=Contexts(),
        sessions=FileSessionStore(Path.home() / '.govuk' / 'sessions'),
        roles=ProfileRoleMapping(),
        provider=StsCredentialProvider(),
        prompt=TerminalTokenPrompt(),
        username='jane.doe')

    session = manager.acquire('staging')

Role and MFA settings are looked up by profile name: the identity profile
(`gds` by default) provides `mfa_serial`, and the profile for a context,
`govuk-<context>` by default, provides `role_arn`. The same names are used as
the session store slots.
"""

import logging
from datetime import datetime, timezone

from govukcli.session import EXPIRY_MARGIN

LOG = logging.getLogger(__name__)

SESSION_NAME_FORMAT = "%d-%m-%Y_%H-%M"


class SessionManager:
    """Obtains and caches identity and environment sessions.

    `contexts` is a `govukcli.context.Contexts`, `sessions` a
    `govukcli.store.SessionStore`, and `roles` an object with `mfa_serial` and
    `role_arn` methods taking a profile name, such as
    `govukcli.session.aws.ProfileRoleMapping`. `provider` and `prompt` are the
    `govukcli.session.CredentialProvider` and `govukcli.session.TokenPrompt`
    used when sessions must be refreshed. `username` is used to name assumed
    role sessions.
    """

    def __init__(
        self,
        contexts,
        sessions,
        roles,
        provider,
        prompt,
        username,
        identity_profile="gds",
        role_profile_prefix="govuk-",
        margin=EXPIRY_MARGIN,
    ):
        self._contexts = contexts
        self._sessions = sessions
        self._roles = roles
        self._provider = provider
        self._prompt = prompt
        self._username = username
        self._identity_profile = identity_profile
        self._role_profile_prefix = role_profile_prefix
        self._margin = margin

    def role_profile(self, context):
        """Returns the name of the AWS profile holding the role for `context`."""
        return self._role_profile_prefix + context

    def acquire(self, context):
        """Returns a fresh environment session for `context`.

        Raises `govukcli.context.InvalidContext` if `context` is not valid and
        `govukcli.session.CredentialExchangeFailed` if the provider rejects an
        exchange. Nothing is retried.
        """
        self._contexts.validate(context)
        slot = self.role_profile(context)

        session = self._sessions.get(slot)
        if session is not None and session.is_valid(margin=self._margin):
            LOG.info("Using cached credentials for %s", context)
            return session

        identity = self.identity()

        role_arn = self._roles.role_arn(slot)
        session_name = self.session_name()
        LOG.info("Assuming role %s as %s", role_arn, session_name)
        session = self._provider.assume_role(identity, role_arn, session_name)

        self._sessions.put(slot, session)
        LOG.info("Credentials for %s expire at %s", context, session.expiration)
        return session

    def identity(self):
        """Returns a fresh identity session, prompting for MFA if needed."""
        slot = self._identity_profile
        identity = self._sessions.get(slot)

        if identity is not None and identity.is_valid(margin=self._margin):
            LOG.debug("Using cached identity session")
            return identity

        mfa_serial = self._roles.mfa_serial(slot)
        token = self._prompt.token(mfa_serial, expired=identity is not None)

        LOG.info("Requesting session token for %s", mfa_serial)
        identity = self._provider.get_session_token(slot, mfa_serial, token)

        self._sessions.put(slot, identity)
        return identity

    def session_name(self, now=None):
        """Returns the role session name, `<username>-<day-month-year_hour-minute>`."""
        now = now or datetime.now(timezone.utc)
        return f"{self._username}-{now.strftime(SESSION_NAME_FORMAT)}"
