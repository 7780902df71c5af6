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
import re
from typing import Any, Callable, Dict, List


def _to_snake_case(dictionary: Dict[str, Any], case_style: str) -> Dict[str, Any]:
    """
    Ensure that all keys in the dictionary follows the snake casing convention (recursively, so any sub-dictionaries are
    changed too).

    Args:
        dictionary: Dictionary to update.
        case_style: Existing casing convention. Either 'snake', 'hyphen' or 'camel'.

    Returns:
        An updated dictionary with keys in the given convention.
    """

    def fix_value(value: Any, key_translator: Callable[[str], str]) -> Any:
        if isinstance(value, dict):
            return {key_translator(k): fix_value(v, key_translator) for k, v in value.items()}
        if isinstance(value, list):
            return [fix_value(element, key_translator) for element in value]
        return value

    def translate_hyphen(key: str) -> str:
        return key.replace("-", "_")

    def translate_camel(key: str) -> str:
        return re.sub(r"([A-Z]+)", r"_\1", key).strip("_").lower()

    if case_style in ("snake", "underscore"):
        return dictionary
    elif case_style in ("hyphen", "kebab"):
        return fix_value(dictionary, translate_hyphen)
    elif case_style in ("camel", "pascal"):
        return fix_value(dictionary, translate_camel)
    else:
        raise ValueError(f"Invalid case style: {case_style}")


def _expand_keys(keys: List[str], case_style: str) -> List[str]:
    return [f'"{k.replace("_", "-") if case_style == "hyphen" else k}"' for k in keys]
