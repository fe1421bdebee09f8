"""Shared fixtures for the RAHL test suite."""

import pytest

from rahl.capabilities import CapabilityRegistry
from rahl.config import RahlConfig


class FakeCalculator:
    """Sync capability that reports its own failures as a result dict."""

    name = "calculator"
    description = "Perform mathematical calculations"
    version = "1.0.0"

    def __init__(self):
        self.calls = []

    def execute(self, expression, options=None):
        self.calls.append((expression, options))
        if expression == "2+2":
            return {"success": True, "expression": expression, "result": "4", "formatted": "4", "source": "calculator"}
        return {"success": False, "error": f"Cannot evaluate '{expression}'", "expression": expression}


class FakeSearch:
    """Async capability."""

    name = "web_search"
    description = "Search the web for information"

    def __init__(self):
        self.calls = []

    async def execute(self, query, options=None):
        self.calls.append((query, options))
        limit = (options or {}).get("limit", 5)
        return {"success": True, "query": query, "results": [f"result {i}" for i in range(limit)]}


class DetailError(Exception):
    def __init__(self, message, detail):
        super().__init__(message)
        self.detail = detail


class ExplodingCapability:
    """Raises from execute, with structured detail attached."""

    name = "code_executor"

    def execute(self, code, options=None):
        raise DetailError("SyntaxError: invalid syntax (line 1)", {"line": 1})


@pytest.fixture
def calculator():
    return FakeCalculator()


@pytest.fixture
def search():
    return FakeSearch()


@pytest.fixture
def exploding():
    return ExplodingCapability()


@pytest.fixture
def registry(calculator, search, exploding):
    reg = CapabilityRegistry()
    reg.register(calculator)
    reg.register(search)
    reg.register(exploding)
    return reg


@pytest.fixture
def rahl_config():
    """A minimal RahlConfig with no capabilities configured."""
    return RahlConfig()
