"""
Module containing functions for loading configuration files.
"""
#  Copyright 2026 The interval-runner authors
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

import os
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO, TypeVar

import dacite
import yaml
from yaml.error import MarkedYAMLError

from intervalrunner.configtools._util import _expand_keys, _to_snake_case
from intervalrunner.configtools.elements import BaseConfig, CastableInt, PortNumber, TimeIntervalConfig
from intervalrunner.exceptions import InvalidConfigError

CustomConfigClass = TypeVar("CustomConfigClass", bound=BaseConfig)


class _EnvLoader(yaml.SafeLoader):
    pass


def _env_constructor(_: yaml.SafeLoader, node: yaml.Node) -> Any:
    bool_values = {
        "true": True,
        "false": False,
    }
    expanded_value = os.path.expandvars(node.value)
    return bool_values.get(expanded_value.lower(), expanded_value)


_EnvLoader.add_implicit_resolver("!env", re.compile(r".*\$\{([^}^{]+)\}.*"), None)
_EnvLoader.add_constructor("!env", _env_constructor)


def _load_yaml_dict(
    source: TextIO | str,
    case_style: str = "hyphen",
    expand_envvars: bool = True,
) -> dict[str, Any]:
    loader = _EnvLoader if expand_envvars else yaml.SafeLoader

    try:
        config_dict = yaml.load(source, Loader=loader)  # noqa: S506
    except MarkedYAMLError as e:
        location = e.problem_mark or e.context_mark
        formatted_location = (
            f" at line {location.line + 1}, column {location.column + 1}" if location is not None else ""
        )
        cause = e.problem or e.context
        raise InvalidConfigError(f"Invalid YAML{formatted_location}: {cause or ''}") from e

    # An empty document means all defaults
    if config_dict is None:
        config_dict = {}
    if not isinstance(config_dict, dict):
        raise InvalidConfigError("The root node of the YAML document must be an object")

    return _to_snake_case(config_dict, case_style)


def _load_yaml(
    source: TextIO | str,
    config_type: type[CustomConfigClass],
    case_style: str = "hyphen",
    expand_envvars: bool = True,
) -> CustomConfigClass:
    config_dict = _load_yaml_dict(source, case_style=case_style, expand_envvars=expand_envvars)

    try:
        config = dacite.from_dict(
            data=config_dict,
            data_class=config_type,
            config=dacite.Config(strict=True, cast=[TimeIntervalConfig, PortNumber, CastableInt]),
        )
    except dacite.UnexpectedDataError as e:
        unknowns = _expand_keys(sorted(e.keys), case_style)
        raise InvalidConfigError(
            f"Unknown config parameter{'s' if len(unknowns) > 1 else ''} {', '.join(unknowns)}"
        ) from e

    except (dacite.WrongTypeError, dacite.MissingValueError, dacite.UnionMatchError) as e:
        path = (e.field_path.replace("_", "-") if case_style == "hyphen" else e.field_path) if e.field_path else None

        def name(type_: type) -> str:
            return type_.__name__ if hasattr(type_, "__name__") else str(type_)

        def all_types(type_: type) -> Iterable[type]:
            return type_.__args__ if hasattr(type_, "__args__") else [type_]

        if isinstance(e, (dacite.WrongTypeError, dacite.UnionMatchError)) and e.value is not None:
            got_type = name(type(e.value))
            need_type = ", ".join(name(t) for t in all_types(e.field_type))

            raise InvalidConfigError(
                f'Wrong type for field "{path}" - got "{e.value}" of type {got_type} instead of {need_type}'
            ) from e
        raise InvalidConfigError(f'Missing mandatory field "{path}"') from e

    except dacite.ForwardReferenceError as e:
        raise ValueError(f"Invalid config class: {e!s}") from e

    except ValueError as e:
        # Raised by the cast types, e.g. an out of range port number
        raise InvalidConfigError(str(e)) from e

    return config


def load_yaml(
    source: TextIO | str,
    config_type: type[CustomConfigClass],
    case_style: str = "hyphen",
    expand_envvars: bool = True,
) -> CustomConfigClass:
    """
    Read a YAML file, and create a config object based on its contents.

    Args:
        source: Input stream (as returned by open(...)) or string containing YAML.
        config_type: Class of config type (i.e. ``BaseConfig`` or a subclass of it).
        case_style: Casing convention of config file. Valid options are 'snake', 'hyphen' or 'camel'. Should be
            'hyphen'.
        expand_envvars: Substitute values with the pattern ${VAR} with the content of the environment variable VAR

    Returns:
        An initialized config object.

    Raises:
        InvalidConfigError: If any config field is given as an invalid type, is missing or is unknown
    """
    return _load_yaml(source=source, config_type=config_type, case_style=case_style, expand_envvars=expand_envvars)


def load_yaml_dict(
    source: TextIO | str,
    case_style: str = "hyphen",
    expand_envvars: bool = True,
) -> dict[str, Any]:
    """
    Read a YAML file and return a dictionary from its contents.

    Args:
        source: Input stream (as returned by open(...)) or string containing YAML.
        case_style: Casing convention of config file. Valid options are 'snake', 'hyphen' or 'camel'. Should be
            'hyphen'.
        expand_envvars: Substitute values with the pattern ${VAR} with the content of the environment variable VAR

    Returns:
        A raw dict with the contents of the config file.

    Raises:
        InvalidConfigError: If the file is not valid YAML, or the root is not an object
    """
    return _load_yaml_dict(source, case_style=case_style, expand_envvars=expand_envvars)


def load_file(path: Path | str, config_type: type[CustomConfigClass]) -> CustomConfigClass:
    """
    Load a config file from disk.

    Raises:
        InvalidConfigError: If the file does not exist, or its contents are invalid
    """
    path = Path(path)
    if not path.is_file():
        raise InvalidConfigError(f"Config file {path} not found")

    with open(path) as infile:
        return load_yaml(infile, config_type)
