import pytest

from harness import Protocol, build_protocol


@pytest.fixture
def protocol() -> Protocol:
    return build_protocol()
