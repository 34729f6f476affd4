from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from newsletter.api.dependencies import get_store
from newsletter.db.store import SubscriberStore
from newsletter.errors import DeserializationError, DuplicateError, NotFoundError, StorageError, ValidationError
from newsletter.models.schemas import SubscriberRecord
from newsletter.models.subscriber import Subscriber, subscriber_from_record, subscriber_to_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscription", tags=["subscription"])


def _to_record(subscriber: Subscriber) -> SubscriberRecord:
    return SubscriberRecord.model_validate(subscriber_to_record(subscriber))


@router.get("/{email}", response_model=SubscriberRecord)
def get_subscriber(email: str, store: SubscriberStore = Depends(get_store)) -> SubscriberRecord:
    try:
        subscriber = store.read(email)
    except NotFoundError as exc:
        logger.info("subscriber.not_found", extra={"email": email})
        raise HTTPException(status_code=404, detail="Subscriber not found") from exc
    except DeserializationError as exc:
        logger.error("subscriber.corrupt", extra={"email": email, "error": str(exc)})
        raise HTTPException(status_code=404, detail="Subscriber not found") from exc
    except StorageError as exc:
        logger.error("subscriber.read_failed", extra={"email": email, "error": str(exc)})
        raise HTTPException(status_code=404, detail="Subscriber not found") from exc

    logger.info("subscriber.read", extra={"email": email})
    return _to_record(subscriber)


@router.post("", response_model=SubscriberRecord, status_code=201)
def add_subscriber(
    payload: dict[str, Any] = Body(...),
    store: SubscriberStore = Depends(get_store),
) -> SubscriberRecord:
    try:
        subscriber = subscriber_from_record(payload)
    except ValidationError as exc:
        logger.warning("subscriber.invalid", extra={"error": str(exc)})
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not store.write(subscriber):
        if store.exists(subscriber.email):
            raise HTTPException(status_code=400, detail=str(DuplicateError(subscriber.email)))
        raise HTTPException(status_code=400, detail="Subscriber could not be stored")

    return _to_record(subscriber)


@router.put("")
def update_subscriber() -> Response:
    logger.warning("subscriber.update_not_implemented")
    return Response(status_code=501)


@router.delete("/{email}")
def delete_subscriber(email: str) -> Response:
    logger.warning("subscriber.delete_not_implemented", extra={"email": email})
    return Response(status_code=501)
