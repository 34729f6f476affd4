from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from newsletter.config import get_settings
from newsletter.db.store import SubscriberStore
from newsletter.main import app
from newsletter.models.subscriber import Gender, Subscriber, build_subscriber
from newsletter.observability.metrics import reset_metrics

NEWSLETTER_ID = "fdsavdsasdsda"


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path / "storage"))
    monkeypatch.setenv("ENABLE_METRICS_ENDPOINT", "true")
    get_settings.cache_clear()
    reset_metrics()

    app.state.store = SubscriberStore(get_settings().storage_path)

    yield

    app.state.store = None
    get_settings.cache_clear()


@pytest.fixture
def store() -> SubscriberStore:
    return app.state.store


@pytest.fixture
def subscriber() -> Subscriber:
    return build_subscriber(
        email="jonh@gmail.com",
        first_name="Jonh",
        gender=Gender.MALE,
        birth_day=date(2000, 12, 25),
        consent=True,
        newsletter_id=NEWSLETTER_ID,
    )


@pytest.fixture
def subscriber_payload() -> dict[str, str]:
    return {
        "email": "jonh@gmail.com",
        "firstName": "Jonh",
        "gender": "male",
        "birthDay": "2000-12-25",
        "consent": "true",
        "newsletterId": NEWSLETTER_ID,
    }


@pytest.fixture
async def api_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
