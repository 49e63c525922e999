"""Pytest configuration: register custom markers."""


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: marks tests that normalize large generated inputs"
    )
