"""
Structured key/value logging on top of the standard ``logging`` module.

A ``FieldsAdapter`` wraps a regular logger and appends its fields to every message, so that

.. code-block:: python

    logger = FieldsAdapter(logging.getLogger("app"), {"application": "demo"})
    logger.info("Started", fields={"mood": "hyped"})

is emitted as ``Started application=demo mood=hyped``.
"""

import logging
from typing import Any, Dict, Mapping, MutableMapping, Optional, Tuple


class FieldsAdapter(logging.LoggerAdapter):
    """
    Logger adapter carrying a set of key/value fields.

    Args:
        logger: Logger to send records to.
        fields: Fields to attach to every message.
    """

    def __init__(self, logger: logging.Logger, fields: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(logger, dict(fields or {}))

    @property
    def fields(self) -> Dict[str, Any]:
        return dict(self.extra or {})

    def bind(self, **fields: Any) -> "FieldsAdapter":
        """
        Create a new adapter with the given fields added to the fields of this one.
        """
        return FieldsAdapter(self.logger, {**self.fields, **fields})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        fields = {**self.fields, **(kwargs.pop("fields", None) or {})}
        if fields:
            msg = f"{msg} " + " ".join(f"{key}={value}" for key, value in fields.items())
        return msg, kwargs
