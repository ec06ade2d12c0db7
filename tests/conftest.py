"""Shared fixtures for table-patterns tests."""

from collections.abc import Iterator
from typing import Any

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[None]:
    """Detach any sinks the CLI added so later tests don't write to closed streams."""
    yield
    logger.remove()
    logger.disable("table_patterns")


@pytest.fixture
def blog_models() -> list[dict[str, Any]]:
    """User/Post/Comment/Tag blog schema used across compiler tests."""
    return [
        {
            "name": "User",
            "attributes": {
                "email": {"unique": True, "validation": "required|email"},
                "name": {"required": True},
            },
            "has_many": ["Post"],
        },
        {
            "name": "Post",
            "attributes": {"title": {"required": True}},
            "belongs_to": ["User"],
            "belongs_to_many": ["Tag"],
        },
        {
            "name": "Comment",
            "attributes": {"body": None},
            "belongs_to": ["Post"],
        },
        {
            "name": "Tag",
            "attributes": {"label": None},
        },
    ]
