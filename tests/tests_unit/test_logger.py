import logging

import pytest

from intervalrunner.logger import FieldsAdapter


def test_fields_appended(caplog: pytest.LogCaptureFixture) -> None:
    logger = FieldsAdapter(logging.getLogger("test_fields"), {"application": "logger", "network": "bjartek"})

    with caplog.at_level(logging.INFO):
        logger.info("This is awesome!", fields={"mood": "hyped"})

    assert caplog.messages == ["This is awesome! application=logger network=bjartek mood=hyped"]


def test_no_fields(caplog: pytest.LogCaptureFixture) -> None:
    logger = FieldsAdapter(logging.getLogger("test_no_fields"))

    with caplog.at_level(logging.INFO):
        logger.info("Plain")

    assert caplog.messages == ["Plain"]


def test_bind_does_not_modify_parent(caplog: pytest.LogCaptureFixture) -> None:
    parent = FieldsAdapter(logging.getLogger("test_bind"), {"application": "logger"})
    child = parent.bind(iteration=3, application="child")

    assert parent.fields == {"application": "logger"}
    assert child.fields == {"application": "child", "iteration": 3}
    assert child.logger is parent.logger

    with caplog.at_level(logging.WARNING):
        child.warning("Careful", fields={"iteration": 4})

    assert caplog.messages == ["Careful application=child iteration=4"]


def test_exc_info_passed_through(caplog: pytest.LogCaptureFixture) -> None:
    logger = FieldsAdapter(logging.getLogger("test_exc_info"), {"application": "logger"})
    error = RuntimeError("oh boy")

    with caplog.at_level(logging.ERROR):
        logger.error("This is rather bad.", exc_info=error)

    assert caplog.records[0].exc_info is not None
    assert caplog.records[0].exc_info[1] is error
