#
# Copyright 2026 Government Digital Service
#
# SPDX-License-Identifier: MIT
#
"""Named environments and the operator's current selection.

## Overview

A context is the name of an environment the operator works in, such as
`staging` or `production`. The set of valid names is fixed, either the
`DEFAULT_CONTEXTS` or a list supplied in the user configuration. `Contexts`
validates names against that set and reads or writes the current selection
through a `govukcli.store.ValueStore`:

    contexts = Contexts()
    store = FileValueStore(Path.home() / '.govuk' / 'context')

    contexts.select(store, 'staging')
    contexts.current(store)  # 'staging'

A stored value that is not in the set is treated as a configuration error and
raises `InvalidContext`. It never becomes a new context.
"""

import logging

LOG = logging.getLogger(__name__)

DEFAULT_CONTEXTS = (
    "ci",
    "integration",
    "staging",
    "production",
    "staging-aws",
    "production-aws",
)


class Contexts:
    """The enumerated set of context names.

    `names` is an iterable of context names, which defaults to
    `DEFAULT_CONTEXTS`. Order is preserved for display.
    """

    def __init__(self, names=DEFAULT_CONTEXTS):
        self.names = tuple(names)

    def __iter__(self):
        return iter(self.names)

    def __contains__(self, name):
        return name in self.names

    def validate(self, name):
        """Returns `name` if it is a valid context, raises `InvalidContext` otherwise."""
        if not name or name not in self.names:
            raise InvalidContext(name, self.names)
        return name

    def current(self, store):
        """Returns the context persisted in `store`.

        Raises `ContextNotSet` if nothing has been selected yet, and
        `InvalidContext` if the persisted value is not in the set.
        """
        name = store.get()
        if name is None:
            raise ContextNotSet()
        return self.validate(name)

    def select(self, store, name):
        """Validates `name` and persists it as the current context.

        Nothing is written if `name` is invalid.
        """
        self.validate(name)
        store.put(name)
        LOG.info("Switched to context %s", name)
        return name


class InvalidContext(Exception):
    """Raised if a context is absent or not one of the valid names."""

    exit_status = 1

    def __init__(self, name, valid):
        self.name = name
        self.valid = tuple(valid)
        if name:
            msg = f"Unknown context '{name}'."
        else:
            msg = "No context given."
        super().__init__(f"{msg} Valid contexts are: {', '.join(self.valid)}")


class ContextNotSet(Exception):
    """Raised if no current context has been selected."""

    exit_status = 1

    def __init__(self):
        super().__init__(
            "No context is set. Run 'govuk set-context <context>' to choose one."
        )
