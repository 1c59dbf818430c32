"""Pytest configuration and fixtures."""

import pytest

from dump_helpers import buildApiDump


@pytest.fixture
def api_dump():
    """A small API dump covering every member kind the generator handles."""
    return buildApiDump()
