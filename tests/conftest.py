from __future__ import annotations

from contextlib import ExitStack
from unittest.mock import patch

import pytest

from company_finder.config import settings


@pytest.fixture
def credentials():
    """Configure every credential the pipeline checks for."""
    values = {
        "google_api_key": "google-key",
        "google_search_engine_id": "engine-id",
        "openrouter_api_key": "sk-or-test",
        "search_provider": "google",
        "search_degraded_fallback": False,
    }
    with ExitStack() as stack:
        for name, value in values.items():
            stack.enter_context(patch.object(settings, name, value))
        yield settings
