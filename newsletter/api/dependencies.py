from __future__ import annotations

from fastapi import Request

from newsletter.db.store import SubscriberStore


def get_store(request: Request) -> SubscriberStore:
    """The store built at startup and kept on ``app.state``."""
    return request.app.state.store
