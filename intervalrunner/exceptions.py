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


class InvalidConfigError(Exception):
    """
    Exception thrown from ``load_yaml`` and ``load_yaml_dict`` if config file is invalid. This can be due to

      * Missing fields
      * Incompatible types
      * Unkown fields
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"Invalid config: {self.message}"

    def __repr__(self) -> str:
        return self.__str__()


class InvalidArgumentError(Exception):
    """
    Exception thrown when the scheduler is given an argument it can't use, such as a non-positive interval or a
    negative override from a task.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"Invalid argument: {self.message}"

    def __repr__(self) -> str:
        return self.__str__()


class TaskFailedError(Exception):
    """
    A task raised during an iteration. The original exception is kept as ``__cause__``.

    Args:
        iteration: The iteration the task failed on.
        cause: The exception raised by the task.
    """

    def __init__(self, iteration: int, cause: BaseException) -> None:
        super().__init__(f"Task failed on iteration {iteration}: {cause!s}")
        self.iteration = iteration
        self.__cause__ = cause
