import functools
import logging
import textwrap

import click.testing
import pytest

from clientaggregator.cli import main

TABLE = """
default: primary
groups:
  apps: secondary
  "": core
kinds:
  - group: batch
    kind: Job
    backend: jobs
"""


@pytest.fixture(autouse=True)
def _restore_root_logger():
    logger = logging.getLogger()
    original_handlers = logger.handlers[:]
    original_level = logger.level
    yield
    logger.handlers[:] = original_handlers
    logger.setLevel(original_level)


@pytest.fixture()
def table_path(tmp_path):
    path = tmp_path / 'routes.yaml'
    path.write_text(textwrap.dedent(TABLE))
    return str(path)


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)
