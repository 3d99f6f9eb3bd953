# tests/conftest.py
import logging

import pytest
from fastapi.testclient import TestClient

from roi_analyzer.adapters.memory_store import InMemoryKeyValueStore
from roi_analyzer.api.http import app, get_store  # ensures imports resolve; run tests from repo root
from roi_analyzer.repos.scenarios_repo import ScenarioStore


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured_logger(request):
    """
    A private logger whose records land in `logger.records` so tests can
    assert on what the store reported.
    """
    logger = logging.getLogger(f"tests.{request.node.name}")
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    handler = _ListHandler()
    logger.addHandler(handler)
    logger.records = handler.records  # type: ignore[attr-defined]
    yield logger
    logger.removeHandler(handler)


@pytest.fixture
def backend():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(backend, captured_logger):
    return ScenarioStore(backend, "test.scenarios", logger=captured_logger)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
