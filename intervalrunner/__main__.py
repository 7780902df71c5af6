"""
Command line entry point, running a demo task that logs a few structured messages on every iteration.

.. code-block:: bash

    python -m intervalrunner --config config.yaml --interval 500ms
"""

import logging
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from intervalrunner import __version__
from intervalrunner.configtools import BaseConfig, SchedulerConfig, TimeIntervalConfig, load_file
from intervalrunner.exceptions import InvalidConfigError
from intervalrunner.logger import FieldsAdapter
from intervalrunner.metrics import SchedulerMetrics, safe_get
from intervalrunner.scheduler import Task, run


def _create_argparser() -> ArgumentParser:
    argparser = ArgumentParser(prog="interval-runner", description="Run a task periodically until stopped")
    argparser.add_argument("-v", "--version", action="version", version=f"interval-runner v{__version__}")
    argparser.add_argument(
        "-c",
        "--config",
        nargs=1,
        type=Path,
        required=False,
        default=None,
        help="Path to a YAML config file. Defaults are used if omitted.",
    )
    argparser.add_argument(
        "-i",
        "--interval",
        type=str,
        required=False,
        default=None,
        help="Override the scheduler interval from the config file, e.g. 500ms or 5s",
    )
    argparser.add_argument(
        "-n",
        "--name",
        type=str,
        required=False,
        default="interval-runner",
        help="Application name, used as logger name and metrics prefix",
    )
    return argparser


def _wrapped_error() -> Exception:
    try:
        try:
            raise ValueError("Foobar")
        except ValueError as e:
            raise RuntimeError("oh boy baaaz") from e
    except RuntimeError as wrapped:
        return wrapped


def _log_demo_messages(logger: FieldsAdapter, error: Exception) -> None:
    logger.info("This is awesome!", fields={"mood": "hyped"})
    logger.warning("This is not that awesome...", fields={"mood": "worried"})
    logger.error("This is rather bad.", fields={"mood": "depressed"}, exc_info=error)


def demo_task(logger: FieldsAdapter) -> Task:
    error = _wrapped_error()

    def task(iteration: int) -> None:
        _log_demo_messages(logger.bind(iteration=iteration), error)

    return task


def load_config(args_config: Optional[List[Path]], interval: Optional[str]) -> BaseConfig:
    config = load_file(args_config[0], BaseConfig) if args_config else BaseConfig()
    if interval is not None:
        config.scheduler = SchedulerConfig(
            interval=TimeIntervalConfig(interval),
            handle_signals=config.scheduler.handle_signals,
        )
    return config


def main(argv: Optional[List[str]] = None) -> None:
    args = _create_argparser().parse_args(argv)

    env_file_found = load_dotenv(dotenv_path="./.env", override=True)

    try:
        config = load_config(args.config, args.interval)
    except InvalidConfigError as e:
        print("Critical error: Could not read config file", file=sys.stderr)  # noqa: T201
        print(str(e), file=sys.stderr)  # noqa: T201
        sys.exit(1)

    config.logger.setup_logging()
    logger = FieldsAdapter(logging.getLogger(args.name), config.logger.fields)
    if env_file_found:
        logger.info("Successfully ingested environment variables from './.env'")

    config.metrics.start_server()
    metrics = safe_get(SchedulerMetrics, name=args.name, version=__version__)

    _log_demo_messages(logger, _wrapped_error())

    run(
        demo_task(logger),
        config.scheduler.interval,
        handle_signals=config.scheduler.handle_signals,
        metrics=metrics,
        logger=logger,
    )


if __name__ == "__main__":
    main()
