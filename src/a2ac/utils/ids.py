"""Unique identifiers for JSON-RPC requests, tasks and endpoints."""

from __future__ import annotations

from collections.abc import Callable
from uuid import uuid4

IdFactory = Callable[[], str]


def new_id() -> str:
    """Return a fresh random UUID string."""
    return str(uuid4())
