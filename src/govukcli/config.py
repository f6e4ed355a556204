#
# Copyright 2026 Government Digital Service
#
# SPDX-License-Identifier: MIT
#
"""Reads the `govuk` YAML configuration file with type-checked values.

## Overview

`Config` wraps the dict loaded from the user's configuration file, which is
`$HOME/.govuk.yaml` unless the `GOVUK_CONFIG` environment variable points
elsewhere. A missing file is not an error, it simply yields an empty `Config`,
so every option must have a sensible default.

For example, given the following file:

    CLI:
      contexts:
        - staging
        - production
      jump_host: "jump.{context}.example.com"
      duration: 3600

Values are read by giving the keys that lead to them:

    c = Config.from_file('~/.govuk.yaml')
    c.get('CLI', 'contexts', type=List(Str), default=[])
    c.get('CLI', 'duration', type=Int)
    c.get('CLI', 'credential_provider', type=Choice('sts', 'awscli'), default='sts')

If a value does not match the expected type, a `TypeError` is raised. If a key
along the path holds something other than a dict, a `ValueError` is raised.
"""

import logging
import re
from functools import reduce
from pathlib import Path

import yaml

LOG = logging.getLogger(__name__)

# pylint: disable=unidiomatic-typecheck
#
# isinstance(True, int) is true, so exact types are compared instead.


class Config:
    """A `Config` reads type-checked values from a nested dictionary."""

    @classmethod
    def from_file(cls, filename, must_exist=False):
        """Load a `Config` from a YAML file.

        If the file does not exist, an empty `Config` is returned unless
        `must_exist` is true, in which case a `FileNotFoundError` is raised.
        """
        path = Path(filename).expanduser()

        if not path.is_file():
            if must_exist:
                raise FileNotFoundError(f"Config file not found: {filename}")
            LOG.debug("no config file at %s, using defaults", path)
            return cls({})

        LOG.debug("loading config from %s", path)
        with path.open(encoding="utf-8") as f:
            return cls(yaml.safe_load(f) or {})

    def __init__(self, d):
        self.conf = d

    def get(self, *keys, default=None, type=None, must_exist=False):
        """Return the value found by following `keys` into the configuration.

        If no value exists, `default` is returned, or a `ValueError` is raised
        when `must_exist` is true. When `type` is given, the value must type
        check against it or a `TypeError` is raised:

            c.get('CLI', 'state_dir', type=Str)
            c.get('CLI', 'contexts', type=List(Str))
            c.get('CLI', 'verbosity', type=Choice('silent', 'info', 'debug'))
        """
        # pylint: disable=redefined-builtin
        try:
            value = reduce(lambda a, p: a.get(p, {}), keys, self.conf)
        except AttributeError as e:
            raise ValueError(
                f"Error in config: {'->'.join(keys[:-1])}: not a dictionary"
            ) from e

        # An empty dict means the key is absent.
        if value == {}:
            if must_exist:
                raise ValueError(f"Error in config: {'->'.join(keys)}: must be set")
            value = default

        if value is None or not type:
            return value

        if type.type_check(value):
            return value

        raise TypeError(
            f"Error in config: {'->'.join(keys)}: not a {type}: {repr(value)}"
        )


class Type:
    """Represents a type that can be used in type-check comparisons."""

    def type_check(self, obj):
        """Returns true if obj is a type matching this `Type`."""
        raise NotImplementedError

    def __str__(self):
        raise NotImplementedError


class Scalar(Type):
    """Represents a builtin scalar type such as `str` or `int`."""

    def __init__(self, type_):
        self.type = type_

    def type_check(self, obj):
        return type(obj) == self.type  # noqa: E721

    def __str__(self):
        return self.type.__name__


class Choice(Type):
    """Represents one of a fixed set of constants."""

    def __init__(self, *constants):
        self.constants = constants

    def type_check(self, obj):
        return any(
            type(obj) == type(c) and obj == c for c in self.constants  # noqa: E721
        )

    def __str__(self):
        return "one of " + ", ".join(f"'{c}'" for c in self.constants)


class StrMatch(Type):
    """Represents a string matching `pattern` (via `re.search`)."""

    def __init__(self, pattern):
        self.pattern = pattern

    def type_check(self, obj):
        if type(obj) != str:  # noqa: E721
            return False
        return bool(re.search(self.pattern, obj))

    def __str__(self):
        return f"str matching '{self.pattern}'"


class List(Type):
    """Represents a list containing elements of `element_type`."""

    def __init__(self, element_type):
        self.element_type = element_type

    def type_check(self, obj):
        if type(obj) != list:  # noqa: E721
            return False
        return all(self.element_type.type_check(e) for e in obj)

    def __str__(self):
        return f"list of {self.element_type}"


Str = Scalar(str)
"""Singleton representing a str."""

Int = Scalar(int)
"""Singleton representing an int."""

ContextName = StrMatch(r"^[a-z0-9][a-z0-9-]*$")
"""Singleton representing a context name such as `staging-aws`."""
