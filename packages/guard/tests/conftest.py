"""Pytest configuration for dataknobs_guard tests."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add the package source to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture
def deferred():
    """Build an async function returning (or raising) after yielding to the event loop."""

    def _make(result=None, error=None, delay=0):
        async def _step(value=None, *extra):
            await asyncio.sleep(delay)
            if error is not None:
                raise error
            return value if result is None else result

        return _step

    return _make
