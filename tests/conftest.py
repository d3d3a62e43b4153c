import pytest
from loguru import logger

from formfiller.components.executors import OptionMatcher, StateInjector, StepSequencer
from formfiller.components.locators import ElementLocator
from formfiller.config import FillerConfig
from tests.fake_tree import FakeRenderTree, VirtualWaiter


@pytest.fixture
def tree():
    return FakeRenderTree()


@pytest.fixture
def waiter():
    return VirtualWaiter()


@pytest.fixture
def locator(tree, waiter):
    return ElementLocator(tree, waiter)


@pytest.fixture
def injector(tree, waiter):
    return StateInjector(tree, waiter=waiter)


@pytest.fixture
def matcher(tree, locator, injector, waiter):
    return OptionMatcher(tree, locator, injector, waiter)


@pytest.fixture
def make_sequencer(tree, waiter):
    def factory(config=None, sections=()):
        return StepSequencer(tree, config or FillerConfig(), waiter=waiter, sections=sections)
    return factory


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during the test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
