import pytest

from paging_engine import REFERENCE_CONFIG, initialize_system


@pytest.fixture
def system():
    return initialize_system(REFERENCE_CONFIG)


@pytest.fixture
def p1(system):
    return system.processes.descriptor(1)


@pytest.fixture
def p2(system):
    return system.processes.descriptor(2)
