import os
import sys
from collections.abc import Generator

import pytest
from loguru import logger
from pytest import LogCaptureFixture

# Settings read the environment on construction; keep the developer's shell out of the tests.
_ENV_PREFIX = "GITEA_DECLARATIVE_"
_EXTRA_ENV_VARS_TO_CLEAR = ["GITHUB_TOKEN"]


def _clear_test_environment_variables() -> dict[str, str]:
    """Clear environment variables that would leak into settings.

    Returns a dictionary of the cleared variables.
    """
    cleared_vars = {}
    for var_name in list(os.environ):
        if var_name.startswith(_ENV_PREFIX) or var_name in _EXTRA_ENV_VARS_TO_CLEAR:
            cleared_vars[var_name] = os.environ.pop(var_name)
    return cleared_vars


_CLEARED_ENV_VARS = _clear_test_environment_variables()


@pytest.fixture
def caplog(caplog: LogCaptureFixture) -> Generator[LogCaptureFixture, None, None]:
    """Fixture to capture log messages during tests.

    See https://loguru.readthedocs.io/en/stable/resources/migration.html#migration-caplog for more information.
    """
    handler_id = logger.add(caplog.handler, format="{message}")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Set up logging for tests."""
    logger.remove()
    logger.add(sys.stderr, format="{time:YYYY-MM-DD HH:mm:ss} | {name}:{function}:{line} | {level} | {message}")
