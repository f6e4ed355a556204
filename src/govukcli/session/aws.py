#
# Copyright 2026 Government Digital Service
#
# SPDX-License-Identifier: MIT
#
"""AWS implementations of the credential interfaces.

## Overview

This module provides the pieces `govukcli.session.manager.SessionManager` needs
to talk to AWS:

`StsCredentialProvider`
:  Calls STS through boto3. This is the default.

`AwsCliCredentialProvider`
:  Runs `aws sts ...` through the AWS CLI and parses its JSON output. Use it
when the AWS CLI has been configured in ways boto3 does not pick up, or to get
the CLI's own exit status on failure.

`ProfileRoleMapping`
:  Reads `mfa_serial` and `role_arn` from profiles in the AWS configuration
file (~/.aws/config). For example:

    [profile gds]
    mfa_serial = arn:aws:iam::111222333444:mfa/jane.doe

    [profile govuk-staging]
    role_arn = arn:aws:iam::222333444111:role/govuk-staging-platformhealth-poweruser

The identity profile (`gds`) must also have long-lived credentials in
~/.aws/credentials, as those are what the STS GetSessionToken call is signed
with.

## Exceptions

`ProfileSettingMissing`
:  Raised if a profile or one of its keys is not in the configuration file.

Both providers raise `govukcli.session.CredentialExchangeFailed` when STS
rejects a request.
"""

import json
import logging
import os
import shutil
import subprocess

import boto3
import botocore.exceptions
import botocore.session

from govukcli.session import CredentialExchangeFailed, CredentialProvider, CredentialSession

LOG = logging.getLogger(__name__)


class StsCredentialProvider(CredentialProvider):
    """A credential provider that calls STS with boto3.

    `duration` is the lifetime in seconds requested for new sessions. If it is
    `None`, the STS defaults apply (12 hours for GetSessionToken and 1 hour for
    AssumeRole). `config_file` overrides the path of the AWS configuration file
    the identity profile is read from.
    """

    def __init__(self, duration=None, config_file=None):
        self._duration = duration
        self._config_file = config_file

    def get_session_token(self, profile, mfa_serial, token_code):
        kwargs = {"SerialNumber": mfa_serial, "TokenCode": token_code}
        if self._duration:
            kwargs["DurationSeconds"] = self._duration

        try:
            sts = self._profile_session(profile).client("sts")
            resp = sts.get_session_token(**kwargs)
        except (botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError) as e:
            raise CredentialExchangeFailed(f"Cannot get session token: {e}") from e

        return CredentialSession.from_credentials(resp["Credentials"])

    def assume_role(self, identity, role_arn, session_name):
        kwargs = {"RoleArn": role_arn, "RoleSessionName": session_name}
        if self._duration:
            kwargs["DurationSeconds"] = self._duration

        try:
            sts = boto3.Session(
                aws_access_key_id=identity.access_key_id,
                aws_secret_access_key=identity.secret_access_key,
                aws_session_token=identity.session_token,
            ).client("sts")
            resp = sts.assume_role(**kwargs)
        except (botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError) as e:
            raise CredentialExchangeFailed(f"Cannot assume role {role_arn}: {e}") from e

        return CredentialSession.from_credentials(resp["Credentials"])

    def _profile_session(self, profile):
        if not self._config_file:
            return boto3.Session(profile_name=profile)

        botocore_session = botocore.session.Session(profile=profile)
        botocore_session.set_config_variable("config_file", str(self._config_file))
        return boto3.Session(botocore_session=botocore_session, profile_name=profile)


class AwsCliCredentialProvider(CredentialProvider):
    """A credential provider that runs the AWS CLI.

    A `FileNotFoundError` is raised if the `aws` executable cannot be found on
    the PATH. When the CLI exits with a non-zero status, its standard error and
    exit status are carried by the `CredentialExchangeFailed` raised. If
    `config_file` is given, it is passed to the CLI as `AWS_CONFIG_FILE`.
    """

    def __init__(self, duration=None, config_file=None):
        self.awscli_path = shutil.which("aws")
        self._duration = duration
        self._config_file = config_file

        if not self.awscli_path:
            raise FileNotFoundError(
                "error: Have you installed the AWS CLI? https://docs.aws.amazon.com/cli/latest/userguide/cli-chap-install.html"
            )

    def get_session_token(self, profile, mfa_serial, token_code):
        cmd = [
            "sts",
            "get-session-token",
            "--profile",
            profile,
            "--serial-number",
            mfa_serial,
            "--token-code",
            token_code,
        ]
        return self._run(cmd, os.environ)

    def assume_role(self, identity, role_arn, session_name):
        cmd = [
            "sts",
            "assume-role",
            "--role-session-name",
            session_name,
            "--role-arn",
            role_arn,
        ]

        # The identity session's credentials must win over any profile the
        # operator has selected in their shell.
        env = {k: v for k, v in os.environ.items() if k != "AWS_PROFILE"}
        env.update(identity.to_env())
        return self._run(cmd, env)

    def _run(self, args, env):
        if self._duration:
            args = args + ["--duration-seconds", str(self._duration)]
        cmd = [self.awscli_path] + args + ["--output", "json"]
        LOG.debug("AWS CLI command: %s", cmd[:3])

        if self._config_file:
            env = dict(env, AWS_CONFIG_FILE=str(self._config_file))

        result = subprocess.run(
            cmd,
            env=env,
            check=False,
            universal_newlines=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )

        if result.returncode != 0:
            raise CredentialExchangeFailed(
                result.stderr.strip() or f"aws {args[1]} failed",
                exit_status=result.returncode,
            )

        try:
            creds = json.loads(result.stdout)["Credentials"]
        except (ValueError, KeyError) as e:
            raise CredentialExchangeFailed(f"Unexpected output from aws {args[1]}") from e

        return CredentialSession.from_credentials(creds)


class ProfileRoleMapping:
    """Looks up MFA devices and role ARNs in the AWS configuration file.

    `config_file` overrides the path of the configuration file, which otherwise
    follows the usual AWS rules (`AWS_CONFIG_FILE` or ~/.aws/config).
    """

    def __init__(self, config_file=None):
        self._config_file = config_file

    def mfa_serial(self, profile):
        """Returns the `mfa_serial` of `profile`."""
        return self._get(profile, "mfa_serial")

    def role_arn(self, profile):
        """Returns the `role_arn` of `profile`."""
        return self._get(profile, "role_arn")

    def _get(self, profile, key):
        session = botocore.session.Session(profile=profile)
        if self._config_file:
            session.set_config_variable("config_file", str(self._config_file))

        try:
            value = session.get_scoped_config().get(key)
        except botocore.exceptions.ProfileNotFound as e:
            raise ProfileSettingMissing(profile, key) from e

        if not value:
            raise ProfileSettingMissing(profile, key)

        LOG.debug("%s for profile %s is %s", key, profile, value)
        return value


class ProfileSettingMissing(Exception):
    """Raised if an AWS profile or one of its keys is not configured."""

    exit_status = 1

    def __init__(self, profile, key):
        super().__init__(f"No {key} set for profile '{profile}' in the AWS config file")
        self.profile = profile
        self.key = key
