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

"""
Module containing tools for loading and verifying config files.

Configs are described as ``dataclass``\\es, and use the ``BaseConfig`` class as the root of the document. A config file
for the runner may look like the following:

.. code-block:: yaml

    logger:
        console:
            level: INFO
        fields:
            application: my-app

    scheduler:
        interval: 500ms

    metrics:
        server:
            port: 9000

You can then load a YAML file into this dataclass with the ``load_yaml`` function:

.. code-block:: python

    with open("config.yaml") as infile:
        config: BaseConfig = load_yaml(infile, BaseConfig)

Values on the form ``${VAR}`` are replaced with the content of the environment variable ``VAR``.
"""

from .elements import (
    BaseConfig,
    CastableInt,
    LoggingConfig,
    MetricsConfig,
    PortNumber,
    SchedulerConfig,
    TimeIntervalConfig,
)
from .loaders import load_file, load_yaml, load_yaml_dict

__all__ = [
    "BaseConfig",
    "CastableInt",
    "LoggingConfig",
    "MetricsConfig",
    "PortNumber",
    "SchedulerConfig",
    "TimeIntervalConfig",
    "load_file",
    "load_yaml",
    "load_yaml_dict",
]
