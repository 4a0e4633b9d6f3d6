"""Shared test configuration and fixtures."""

import pytest

from botsense.security.detection import AgentDetector
from botsense.security.pattern_registry import PatternRegistry
from botsense.security.rules import RuleSet


@pytest.fixture
def registry():
    return PatternRegistry()


@pytest.fixture
def detector(registry):
    return AgentDetector(registry, RuleSet())


@pytest.fixture
def trainer_blocking_detector(registry):
    return AgentDetector(registry, RuleSet(block_ai_model_trainers=True))
