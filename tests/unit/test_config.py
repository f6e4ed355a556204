#
# Copyright 2026 Government Digital Service
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import pytest
import yaml

from govukcli import config


@pytest.fixture(scope="session")
def yaml_config(tmp_path_factory):
    filename = tmp_path_factory.getbasetemp() / "govuk.yaml"
    with filename.open("w") as f:
        yaml.dump(
            {
                "CLI": {
                    "contexts": ["staging", "production-aws"],
                    "jump_host": "jump.{context}.example.com",
                    "duration": 3600,
                    "verbosity": "debug",
                    "empty": None,
                },
            },
            f,
        )
    return filename


@pytest.mark.parametrize(
    "keys, default, type_, expected",
    [
        (["CLI", "duration"], None, config.Int, 3600),
        (["CLI", "duration"], 900, config.Int, 3600),
        (["CLI", "missing"], 900, config.Int, 900),
        (["CLI", "missing"], None, config.Str, None),
        (["CLI", "jump_host"], None, config.Str, "jump.{context}.example.com"),
        (
            ["CLI", "contexts"],
            [],
            config.List(config.ContextName),
            ["staging", "production-aws"],
        ),
        (["CLI", "verbosity"], "info", config.Choice("silent", "info", "debug"), "debug"),
        (["Other", "verbosity"], "info", config.Choice("silent", "info"), "info"),
    ],
)
def test_get_with_valid_types(yaml_config, keys, default, type_, expected):
    c = config.Config.from_file(yaml_config)
    assert c.get(*keys, default=default, type=type_) == expected


@pytest.mark.parametrize(
    "keys, type_",
    [
        (["CLI", "duration"], config.Str),
        (["CLI", "jump_host"], config.Int),
        (["CLI", "contexts"], config.Str),
        (["CLI", "contexts"], config.List(config.Int)),
        (["CLI", "verbosity"], config.Choice("silent", "info")),
    ],
)
def test_get_with_invalid_types(yaml_config, keys, type_):
    c = config.Config.from_file(yaml_config)
    with pytest.raises(TypeError):
        c.get(*keys, type=type_)


@pytest.mark.parametrize(
    "keys",
    [["missing"], ["CLI", "missing"], ["CLI", "empty", "nested"], ["CLI", "duration", "nested"]],
)
def test_get_must_exist(yaml_config, keys):
    c = config.Config.from_file(yaml_config)
    with pytest.raises(ValueError):
        c.get(*keys, must_exist=True)


def test_missing_file_is_empty(tmp_path):
    c = config.Config.from_file(tmp_path / "nope.yaml")
    assert c.get("CLI", "duration", default=5) == 5


def test_missing_file_must_exist(tmp_path):
    with pytest.raises(FileNotFoundError):
        config.Config.from_file(tmp_path / "nope.yaml", must_exist=True)


def test_empty_file(tmp_path):
    filename = tmp_path / "empty.yaml"
    filename.write_text("")
    assert config.Config.from_file(filename).get("CLI", "contexts") is None


@pytest.mark.parametrize(
    "choices, test_input, expected",
    [
        (["sts", "awscli"], "sts", True),
        (["sts", "awscli"], "boto", False),
        (["sts", "awscli"], 10, False),
        ([1, 2], True, False),
        ([1, 2], 1, True),
    ],
)
def test_choice_type(choices, test_input, expected):
    assert config.Choice(*choices).type_check(test_input) == expected


@pytest.mark.parametrize(
    "name, expected",
    [("staging", True), ("production-aws", True), ("Staging", False), ("-ci", False), ("", False)],
)
def test_context_name_type(name, expected):
    assert config.ContextName.type_check(name) == expected
