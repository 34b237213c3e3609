"""Shared fixtures."""

import logging
from collections.abc import Iterator

import pytest

from tf_blocks._settings import SETTINGS_ENV_VAR


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo handlers installed by the CLI's logger setup."""
    yield
    logger = logging.getLogger("tf_blocks")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        SETTINGS_ENV_VAR,
        "TF_BLOCKS_LOG_LEVEL",
        "TF_BLOCKS_LOG_FILE",
        "TF_BLOCKS_INDENT",
    ):
        monkeypatch.delenv(name, raising=False)
