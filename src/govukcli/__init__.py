#
# Copyright 2026 Government Digital Service
#
# SPDX-License-Identifier: MIT
#
"""Operator CLI for switching environments and issuing temporary AWS credentials.

## Overview

`govukcli` is both a CLI, installed as `govuk`, and a small library. The CLI
records which environment ("context") an operator is working in, routes SSH
through that environment's jump host, and runs the AWS CLI, or any other
program, with short-lived credentials for the environment exported in its
environment.

### CLI Usage

The `govuk` CLI is documented on the `govukcli.cli` page, including its
subcommands, the verbosity switch, and the syntax of the configuration file.

### Library Usage

The credential logic can be used without the CLI. Of particular interest to
library users will be the following submodules:

`govukcli.session.manager`
: Contains `govukcli.session.manager.SessionManager`, which hands out
credentials for a context. It reuses cached environment sessions while they are
fresh, and otherwise assumes the environment's role using an MFA-backed identity
session, prompting for an MFA token only when that identity session has lapsed.

`govukcli.session.aws`
: Credential providers backed by boto3 or the AWS CLI, and the role mapping that
reads `mfa_serial` and `role_arn` from the local AWS configuration file.

`govukcli.store`
: File-backed and in-memory stores for the current context, the username, and
cached credential sessions. The in-memory stores make the manager easy to test.
"""

name = "govukcli"
__version__ = "1.0.0"
