"""Shared test fixtures.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
from collections.abc import Callable

import pytest
from hypothesis import Phase, Verbosity, settings

from httpwindow.config import DispatcherSettings
from httpwindow.options import PreparedRequest, TransportOptions, prepare_request
from httpwindow.request import Request
from tests.helpers.scripted_transport import ScriptedTransport

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Timing varies on shared runners
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture
def transport() -> ScriptedTransport:
    """Scripted transport that finishes operations oldest-first."""
    return ScriptedTransport()


@pytest.fixture
def prepare() -> Callable[[Request], PreparedRequest]:
    """Preparer with no default headers and default transport options."""
    options = TransportOptions()
    return lambda request: prepare_request(request, (), options)


@pytest.fixture
def dispatcher_settings() -> DispatcherSettings:
    return DispatcherSettings(window_size=3, poll_timeout=0.01)
