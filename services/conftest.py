"""Shared pytest configuration for all services."""

import os
import shutil

import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests against a real engine binary (STOCKFISH_PATH)",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: test needs a real UCI engine binary on the host"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless --integration is given."""
    if config.getoption("--integration"):
        return
    skip_integration = pytest.mark.skip(reason="need --integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def stockfish_path() -> str:
    """Path of a real Stockfish binary, skipping the test if there is none."""
    path = os.environ.get("STOCKFISH_PATH", "stockfish")
    if shutil.which(path) is None:
        pytest.skip(f"Stockfish binary not available at {path}")
    return path
