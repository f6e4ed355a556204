#
# Copyright 2026 Government Digital Service
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import pytest

from govukcli.context import DEFAULT_CONTEXTS, ContextNotSet, Contexts, InvalidContext
from govukcli.store import MemoryValueStore


@pytest.fixture
def contexts():
    return Contexts()


def test_default_contexts(contexts):
    assert list(contexts) == list(DEFAULT_CONTEXTS)
    assert "staging-aws" in contexts
    assert "bogus" not in contexts


@pytest.mark.parametrize("name", ["bogus", "", None, "Staging"])
def test_validate_rejects_unknown(contexts, name):
    with pytest.raises(InvalidContext) as e:
        contexts.validate(name)
    assert "staging, production" in str(e.value)


def test_select_and_current(contexts):
    store = MemoryValueStore()
    contexts.select(store, "staging")
    assert store.get() == "staging"
    assert contexts.current(store) == "staging"


def test_select_invalid_does_not_write(contexts):
    store = MemoryValueStore("production")
    with pytest.raises(InvalidContext):
        contexts.select(store, "bogus")
    assert store.get() == "production"


def test_current_not_set(contexts):
    with pytest.raises(ContextNotSet) as e:
        contexts.current(MemoryValueStore())
    assert "set-context" in str(e.value)


def test_current_outside_set_is_an_error(contexts):
    with pytest.raises(InvalidContext) as e:
        contexts.current(MemoryValueStore("preview"))
    assert e.value.name == "preview"


def test_custom_contexts():
    contexts = Contexts(["alpha", "beta"])
    assert contexts.validate("beta") == "beta"
    with pytest.raises(InvalidContext):
        contexts.validate("staging")
