#
# Copyright 2026 Government Digital Service
#
# SPDX-License-Identifier: MIT
#
"""The main entry point for the `govuk` CLI.

## Overview

`govuk` remembers which environment, or context, an operator is working in and
uses it to route SSH connections and to issue temporary AWS credentials. The
typical workflow is to pick a context once and then run commands against it:

    $ govuk set-context staging
    $ govuk get-context
    staging
    $ govuk aws s3 ls
    Enter MFA token for arn:aws:iam::111222333444:mfa/jane.doe: 123456
    2019-07-13 15:04:30 govuk-staging-assets
    $ govuk aws invoke terraform plan

The first `aws` call prompts for an MFA token. Later calls reuse the cached
credentials until they are within five minutes of expiring.

## Commands

`set-context NAME`
:  Select the current context. NAME must be one of the valid contexts.

`get-context`
:  Print the current context.

`list-contexts`
:  Print the valid contexts, marking the current one with `*`.

`set-username NAME`
:  Set the username used for SSH and for naming AWS role sessions. Defaults to
the local login name.

`get-username`
:  Print the username.

`ssh [ARGS...]`
:  Run `ssh` through the jump host of the current context. All arguments are
passed to `ssh`.

`aws [ARGS...]`
:  Run the AWS CLI with credentials for the current context.

`aws invoke COMMAND [ARGS...]`
:  Run any program with credentials for the current context in its environment
as `AWS_ACCESS_KEY_ID`, `AWS_SECRET_ACCESS_KEY`, `AWS_SESSION_TOKEN`, and
`AWS_SESSION_EXPIRATION`.

`help`
:  Print a summary of the commands.

`ssh`, `aws`, and `aws invoke` exit with the status of the program they run.
Every other failure exits with status 1 and an error message on standard error.

## Environment

`GOVUK_VERBOSITY`
:  One of `silent`, `info` (the default), or `debug`. `silent` suppresses all
messages, including errors, for use in scripts. `debug` adds timestamps and
logger names and includes messages from boto3.

`GOVUK_HOME`
:  Directory holding the current context, the username, and cached sessions.
Defaults to `~/.govuk`.

`GOVUK_CONFIG`
:  Path of the configuration file. Defaults to `~/.govuk.yaml`.

`GOVUK_TRACE`
:  Set to any value to print a stack trace when a command fails.

## Configuration

Options can be set in a YAML file under a `CLI` key. All are optional:

    CLI:
      contexts: [ci, integration, staging, production]
      state_dir: ~/.govuk
      jump_host: "jumpbox.{context}.publishing.service.gov.uk"
      identity_profile: gds
      role_profile_prefix: govuk-
      aws_config_file: ~/.aws/config
      credential_provider: sts
      duration: 3600
      verbosity: info

`credential_provider` is `sts` to call AWS with boto3, or `awscli` to run the
AWS CLI. `duration` is the lifetime in seconds requested for new sessions.
`GOVUK_VERBOSITY` and `GOVUK_HOME` take precedence over `verbosity` and
`state_dir`.

MFA devices and roles are read from the AWS configuration file. The identity
profile provides `mfa_serial` and each context's profile, `govuk-<context>` by
default, provides `role_arn`. See `govukcli.session.aws` for an example.
"""

import argparse
import getpass
import logging
import os
import shutil
import subprocess
import sys
import traceback
from functools import partial
from pathlib import Path

import colorama
from colorama import Fore, Style

from govukcli import __version__
from govukcli.config import Choice, Config, ContextName, Int, List, Str
from govukcli.context import DEFAULT_CONTEXTS, Contexts
from govukcli.session import TerminalTokenPrompt
from govukcli.session.aws import (
    AwsCliCredentialProvider,
    ProfileRoleMapping,
    StsCredentialProvider,
)
from govukcli.session.manager import SessionManager
from govukcli.store import FileSessionStore, FileValueStore

LOG = logging.getLogger(__name__)

VERBOSITY_LEVELS = ("silent", "info", "debug")

DEFAULT_JUMP_HOST = "jumpbox.{context}.publishing.service.gov.uk"

_PROVIDERS = {"sts": StsCredentialProvider, "awscli": AwsCliCredentialProvider}

SHORT_DESCRIPTION = """
Switches between environments and runs commands against them.

Select a context with set-context, then use ssh to reach its machines
through the jump host, or aws to run the AWS CLI (or, with aws invoke,
any program) with temporary credentials for it.
    """.strip()


# setup.py establishes this as the entry point for the govuk CLI.
def main(argv=None):
    """Runs the `govuk` CLI and exits.

    Exits with the status of the command run. Upon error, prints the error
    message to standard error, unless the verbosity is `silent`, and exits with
    the exception's `exit_status` or 1. A stack trace is only printed if the
    `GOVUK_TRACE` environment variable is set.
    """
    verbosity = os.environ.get("GOVUK_VERBOSITY", "")

    try:
        config = Config.from_file(_config_filename())
        verbosity = verbosity or config.get(
            "CLI", "verbosity", type=Choice(*VERBOSITY_LEVELS), default="info"
        )
        _setup_logging(verbosity)
        status = _cli(sys.argv[1:] if argv is None else argv, config)

    except Exception as e:  # pylint: disable=broad-except
        if os.getenv("GOVUK_TRACE"):
            traceback.print_exc(file=sys.stderr)

        if verbosity != "silent":
            print(e, file=sys.stderr)
        sys.exit(getattr(e, "exit_status", 1))

    sys.exit(status)


def _cli(argv, config):
    """Parses command line arguments and dispatches to a command.

    Returns the exit status for the process.
    """
    parser = _ArgumentParser(
        prog="govuk",
        allow_abbrev=False,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=SHORT_DESCRIPTION,
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s " + __version__
    )
    parser.add_argument("command", nargs="?", help="command to execute")
    parser.add_argument(
        "arguments", nargs=argparse.REMAINDER, default=[], help="arguments for command"
    )

    # Everything after the command, including flags, belongs to the command.
    args = parser.parse_args(argv)

    if not args.command:
        _print_help(parser, out=sys.stderr)
        return 1

    if args.command == "help":
        _print_help(parser)
        return 0

    if args.command not in COMMANDS:
        raise ValueError(
            f"Unknown command '{args.command}'. Run 'govuk help' for a list of commands."
        )

    workspace = _Workspace(config)
    return COMMANDS[args.command](workspace, args.arguments) or 0


class _ArgumentParser(argparse.ArgumentParser):
    """An argument parser whose usage errors exit with status 1 like any other."""

    def error(self, message):
        raise ValueError(f"{self.format_usage()}{self.prog}: error: {message}")


def _set_context(ws, argv):
    """Select the current context"""
    ws.contexts.select(ws.context_store, argv[0] if argv else None)


def _get_context(ws, argv):
    """Print the current context"""
    print(ws.contexts.current(ws.context_store))


def _list_contexts(ws, argv):
    """List the valid contexts"""
    current = ws.context_store.get()
    color = sys.stdout.isatty()
    if color:
        colorama.init()

    for name in ws.contexts:
        if name != current:
            print(f"  {name}")
        elif color:
            print(f"* {Fore.GREEN}{name}{Style.RESET_ALL}")
        else:
            print(f"* {name}")


def _set_username(ws, argv):
    """Set the username used for ssh and AWS sessions"""
    if not argv or not argv[0].strip():
        raise MissingUsername()
    ws.username_store.put(argv[0].strip())
    LOG.info("Username set to %s", argv[0].strip())


def _get_username(ws, argv):
    """Print the username"""
    print(ws.username())


def _ssh(ws, argv):
    """Run ssh through the jump host of the current context"""
    context = ws.contexts.current(ws.context_store)
    ssh_path = shutil.which("ssh")
    if not ssh_path:
        raise FileNotFoundError("error: cannot find ssh on the PATH")

    cmd = [ssh_path, "-J", f"{ws.username()}@{ws.jump_host(context)}"] + argv
    LOG.debug("ssh command: %s", cmd)
    return subprocess.run(cmd, check=False).returncode


def _aws(ws, argv):
    """Run the AWS CLI, or 'invoke' a program, with credentials for the current context"""
    context = ws.contexts.current(ws.context_store)

    if argv and argv[0] == "invoke":
        cmd = argv[1:]
        if not cmd:
            raise ValueError("usage: govuk aws invoke COMMAND [ARGS...]")
    else:
        awscli_path = shutil.which("aws")
        if not awscli_path:
            raise FileNotFoundError(
                "error: Have you installed the AWS CLI? https://docs.aws.amazon.com/cli/latest/userguide/cli-chap-install.html"
            )
        cmd = [awscli_path] + argv

    session = ws.manager().acquire(context)

    # An AWS_PROFILE left in the shell would otherwise take precedence over the
    # exported credentials in some tools.
    env = {k: v for k, v in os.environ.items() if k != "AWS_PROFILE"}
    env.update(session.to_env())

    LOG.debug("%s: running %s", context, cmd)
    return subprocess.run(cmd, env=env, check=False).returncode


COMMANDS = {
    "set-context": _set_context,
    "get-context": _get_context,
    "list-contexts": _list_contexts,
    "set-username": _set_username,
    "get-username": _get_username,
    "ssh": _ssh,
    "aws": _aws,
}


def _print_help(parser, out=None):
    out = out or sys.stdout
    parser.print_help(file=out)
    print(file=out)
    _print_commands(out=out)


def _print_commands(out=None):
    """Pretty print a table of commands."""
    out = out or sys.stdout
    print("The following are the available commands:\n", file=out)
    names = sorted(list(COMMANDS) + ["help"])
    width = max(len(name) for name in names)
    for name in names:
        # By convention, the function docstring is the command summary.
        summary = COMMANDS[name].__doc__ if name in COMMANDS else "Print this help"
        print(f"{name:{width}}  {summary}", file=out)


def _config_filename():
    return os.environ.get("GOVUK_CONFIG", Path.home() / ".govuk.yaml")


def _setup_logging(verbosity):
    if verbosity not in VERBOSITY_LEVELS:
        raise ValueError(
            f"GOVUK_VERBOSITY must be one of {', '.join(VERBOSITY_LEVELS)}, not '{verbosity}'"
        )

    if verbosity == "debug":
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
            force=True,
        )
        logging.getLogger("govukcli").setLevel(logging.NOTSET)
        return

    # Only our own informational messages are shown, boto3's stay quiet.
    logging.basicConfig(level=logging.WARNING, format="%(message)s", force=True)
    level = logging.INFO if verbosity == "info" else logging.CRITICAL + 1
    logging.getLogger().setLevel(max(level, logging.WARNING))
    logging.getLogger("govukcli").setLevel(level)


class _Workspace:
    """The stores and settings the commands operate on.

    Built from the user configuration. Paths are resolved lazily by the
    commands that need them, so a broken option only affects those commands.
    """

    def __init__(self, config):
        self.config = config
        self.cfg = partial(config.get, "CLI")

        home = os.environ.get("GOVUK_HOME") or self.cfg(
            "state_dir", type=Str, default=str(Path.home() / ".govuk")
        )
        self.state_dir = Path(home).expanduser()

        self.contexts = Contexts(
            self.cfg("contexts", type=List(ContextName), default=list(DEFAULT_CONTEXTS))
        )
        self.context_store = FileValueStore(self.state_dir / "context")
        self.username_store = FileValueStore(self.state_dir / "username")

    def username(self):
        """Returns the stored username, or the local login name."""
        return self.username_store.get() or getpass.getuser()

    def jump_host(self, context):
        """Returns the jump host for `context`."""
        template = self.cfg("jump_host", type=Str, default=DEFAULT_JUMP_HOST)
        return template.format(context=context)

    def manager(self):
        """Returns a `SessionManager` configured from the user configuration."""
        provider_name = self.cfg(
            "credential_provider", type=Choice(*_PROVIDERS), default="sts"
        )
        aws_config_file = self.cfg("aws_config_file", type=Str)
        if aws_config_file:
            aws_config_file = Path(aws_config_file).expanduser()

        return SessionManager(
            contexts=self.contexts,
            sessions=FileSessionStore(self.state_dir / "sessions"),
            roles=ProfileRoleMapping(aws_config_file),
            provider=_PROVIDERS[provider_name](
                duration=self.cfg("duration", type=Int), config_file=aws_config_file
            ),
            prompt=TerminalTokenPrompt(),
            username=self.username(),
            identity_profile=self.cfg("identity_profile", type=Str, default="gds"),
            role_profile_prefix=self.cfg(
                "role_profile_prefix", type=Str, default="govuk-"
            ),
        )


class MissingUsername(Exception):
    """Raised if set-username is given no name."""

    exit_status = 1

    def __init__(self):
        super().__init__("No username given. Usage: govuk set-username <name>")


if __name__ == "__main__":
    main()
