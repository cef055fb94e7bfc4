"""
Shared test fixtures and configuration for pytest
"""
import os

import pytest

from termail.tui.keymap import KeyMap
from termail.tui.theme import THEMES

from .test_helpers import FakeProvider, MessageTestHelper


@pytest.fixture
def summaries():
    """Three sample summaries in provider order"""
    return MessageTestHelper.create_summaries(count=3)


@pytest.fixture
def raw_messages():
    """Three sample raw provider messages"""
    return [
        MessageTestHelper.create_raw_message(
            message_id=f"msg_{i}", subject=f"Subject {i}", body=f"Body {i}"
        )
        for i in range(3)
    ]


@pytest.fixture
def fake_provider(raw_messages):
    """Provider returning the sample raw messages"""
    return FakeProvider(raw_messages)


@pytest.fixture
def keymap():
    """Default key binding table"""
    return KeyMap.from_config()


@pytest.fixture
def theme():
    """Default theme"""
    return THEMES["dark"]


@pytest.fixture(autouse=True)
def clear_env_vars():
    """Clear termail environment variables before each test"""
    env_vars = ["TERMAIL_CONFIG"]
    original = {}
    for var in env_vars:
        original[var] = os.environ.get(var)
        if var in os.environ:
            del os.environ[var]

    yield

    for var, value in original.items():
        if value is not None:
            os.environ[var] = value
        elif var in os.environ:
            del os.environ[var]
