import logging
from datetime import timedelta
from pathlib import Path

import pytest
from pytest import approx

from intervalrunner.configtools import (
    BaseConfig,
    LoggingConfig,
    PortNumber,
    TimeIntervalConfig,
    load_file,
    load_yaml,
    load_yaml_dict,
)
from intervalrunner.configtools._util import _to_snake_case
from intervalrunner.configtools.elements import _FileLoggingConfig
from intervalrunner.exceptions import InvalidConfigError


def test_full_config() -> None:
    config = load_yaml(
        """
        version: 1
        logger:
            console:
                level: DEBUG
            fields:
                application: logger
                network: bjartek
        scheduler:
            interval: 200ms
            handle-signals: false
        metrics:
            server:
                port: "9100"
        """,
        BaseConfig,
    )

    assert config.version == 1
    assert config.logger.console is not None
    assert config.logger.console.level == "DEBUG"
    assert config.logger.fields == {"application": "logger", "network": "bjartek"}
    assert config.scheduler.interval.seconds == approx(0.2)
    assert not config.scheduler.handle_signals
    assert config.metrics.server is not None
    assert config.metrics.server.port == 9100
    assert config.metrics.server.host == "0.0.0.0"


def test_empty_config_uses_defaults() -> None:
    config = load_yaml("", BaseConfig)

    assert config.scheduler.interval == TimeIntervalConfig("1s")
    assert config.scheduler.handle_signals
    assert config.logger.console is not None
    assert config.logger.file is None
    assert config.metrics.server is None


def test_env_substitution(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RUNNER_INTERVAL", "5m")
    monkeypatch.setenv("RUNNER_SIGNALS", "false")

    config = load_yaml(
        """
        scheduler:
            interval: ${RUNNER_INTERVAL}
            handle-signals: ${RUNNER_SIGNALS}
        """,
        BaseConfig,
    )

    assert config.scheduler.interval.seconds == 300
    assert config.scheduler.handle_signals is False


def test_unknown_field() -> None:
    with pytest.raises(InvalidConfigError) as e:
        load_yaml("scheduler:\n  interval: 1s\n  some-field: 2\n", BaseConfig)

    assert '"some-field"' in str(e.value)
    assert str(e.value).startswith("Invalid config:")


def test_wrong_type() -> None:
    with pytest.raises(InvalidConfigError) as e:
        load_yaml("scheduler:\n  handle-signals: [1, 2]\n", BaseConfig)

    assert "scheduler.handle-signals" in str(e.value)


def test_non_positive_interval() -> None:
    with pytest.raises(InvalidConfigError):
        load_yaml("scheduler:\n  interval: 0s\n", BaseConfig)


def test_invalid_interval() -> None:
    with pytest.raises(InvalidConfigError):
        load_yaml("scheduler:\n  interval: soon\n", BaseConfig)


@pytest.mark.parametrize("expression", ["nan", "inf", "-inf", "1e400"])
def test_time_interval_not_finite(expression: str) -> None:
    with pytest.raises(InvalidConfigError):
        TimeIntervalConfig(expression)


@pytest.mark.parametrize("interval", [".inf", ".nan", "1e300", "999999999999d"])
def test_interval_not_waitable(interval: str) -> None:
    with pytest.raises(InvalidConfigError):
        load_yaml(f"scheduler:\n  interval: {interval}\n", BaseConfig)


def test_invalid_port() -> None:
    with pytest.raises(InvalidConfigError):
        load_yaml("metrics:\n  server:\n    port: 70000\n", BaseConfig)


def test_invalid_yaml() -> None:
    with pytest.raises(InvalidConfigError) as e:
        load_yaml_dict("scheduler: interval: 1s\n")
    assert "Invalid YAML" in str(e.value)

    with pytest.raises(InvalidConfigError):
        load_yaml_dict("- a\n- b\n")


def test_load_file(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("scheduler:\n  interval: 2h\n")

    assert load_file(path, BaseConfig).scheduler.interval.seconds == 7200

    with pytest.raises(InvalidConfigError):
        load_file(tmp_path / "missing.yaml", BaseConfig)


@pytest.mark.parametrize(
    "expression,seconds",
    [("30", 30), ("1.5", 1.5), ("200ms", 0.2), ("10s", 10), ("5m", 300), ("2h", 7200), ("1d", 86400)],
)
def test_time_interval(expression: str, seconds: float) -> None:
    interval = TimeIntervalConfig(expression)

    assert interval.seconds == approx(seconds)
    assert float(interval) == approx(seconds)
    assert interval.timedelta == timedelta(seconds=interval.seconds)


def test_time_interval_str() -> None:
    assert str(TimeIntervalConfig("5m")) == "5m"
    assert str(TimeIntervalConfig(30)) == "30s"
    assert TimeIntervalConfig("60s") == TimeIntervalConfig("1m")

    with pytest.raises(InvalidConfigError):
        TimeIntervalConfig("5 weeks")


def test_port_number() -> None:
    assert PortNumber("8080") == 8080

    with pytest.raises(ValueError):
        PortNumber(-1)
    with pytest.raises(ValueError):
        PortNumber(True)
    with pytest.raises(ValueError):
        PortNumber(80.5)


def test_snake_case() -> None:
    assert _to_snake_case({"some-key": {"nested-key": [{"list-key": 1}]}}, "hyphen") == {
        "some_key": {"nested_key": [{"list_key": 1}]}
    }
    assert _to_snake_case({"someKey": 1}, "camel") == {"some_key": 1}
    assert _to_snake_case({"some_key": 1}, "snake") == {"some_key": 1}

    with pytest.raises(ValueError):
        _to_snake_case({}, "screaming")


def test_file_logging(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "nested" / "runner.log"
    config = LoggingConfig(console=None, file=_FileLoggingConfig(path=str(log_path), level="INFO"))

    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        config.setup_logging()
        # Setting up twice must not add a second handler for the same file
        config.setup_logging()

        added = [h for h in root.handlers if h not in before]
        assert len(added) == 1

        logging.getLogger("test_file_logging").warning("Written to file")
        added[0].flush()

        assert log_path.exists()
        assert "Written to file" in log_path.read_text()
    finally:
        root.setLevel(level)
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
