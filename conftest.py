"""Configuration for pytest."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _add_standard_imports(doctest_namespace):
    """Add hydrobaseflow namespace for doctest."""
    import hydrobaseflow as hb

    doctest_namespace["hb"] = hb
