# tests/conftest.py
import pytest

from stacks_defi.config import PipelineConfig

from fakes import FakeSession


@pytest.fixture
def cfg():
    return PipelineConfig()


@pytest.fixture
def session():
    return FakeSession()
