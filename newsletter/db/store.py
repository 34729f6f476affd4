from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from time import perf_counter

from newsletter.errors import (
    DeserializationError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from newsletter.models.email import is_email_valid
from newsletter.models.subscriber import Subscriber, subscriber_from_record, subscriber_to_record
from newsletter.observability.metrics import get_metrics

logger = logging.getLogger(__name__)


class SubscriberStore:
    """One JSON file per subscriber, keyed by email, with a read cache.

    A single lock serializes writes against the file-access part of reads.
    The cache is filled on first successful read and is never invalidated,
    so external edits to a cached record are not observed.
    """

    def __init__(self, storage_path: str | Path) -> None:
        self.storage_path = Path(storage_path)
        self._lock = Lock()
        self._cache: dict[str, Subscriber] = {}

    def _path_for(self, email: str) -> Path:
        return self.storage_path / email

    def exists(self, email: str) -> bool:
        if not is_email_valid(email):
            return False
        try:
            return self._path_for(email).is_file()
        except OSError:
            # e.g. names longer than the filesystem allows.
            return False

    def _write_failed(self, subscriber: Subscriber, start: float) -> bool:
        get_metrics().observe_write(created=False, elapsed_ms=(perf_counter() - start) * 1000.0)
        logger.exception("subscriber.write_failed", extra={"email": subscriber.email})
        return False

    def write(self, subscriber: Subscriber) -> bool:
        """Persist a new subscriber; False if one exists or the disk refused."""
        payload = json.dumps(subscriber_to_record(subscriber))
        path = self._path_for(subscriber.email)
        metrics = get_metrics()

        with self._lock:
            start = perf_counter()
            try:
                self.storage_path.mkdir(parents=True, exist_ok=True)
            except OSError:
                return self._write_failed(subscriber, start)

            try:
                # "x" is O_CREAT | O_EXCL: the existence check and the create are one step.
                fh = path.open("x", encoding="utf-8")
                try:
                    with fh:
                        fh.write(payload)
                except OSError:
                    path.unlink(missing_ok=True)
                    raise
            except FileExistsError:
                metrics.observe_write(created=False, elapsed_ms=(perf_counter() - start) * 1000.0)
                logger.info("subscriber.duplicate", extra={"email": subscriber.email})
                return False
            except OSError:
                return self._write_failed(subscriber, start)

        metrics.observe_write(created=True, elapsed_ms=(perf_counter() - start) * 1000.0)
        logger.info("subscriber.created", extra={"email": subscriber.email, "newsletter_id": subscriber.newsletter_id})
        return True

    def read(self, email: str) -> Subscriber:
        metrics = get_metrics()
        cached = self._cache.get(email)
        if cached is not None:
            metrics.observe_read(cache_hit=True)
            return cached

        # Keys that could never have been written; also keeps path params inside storage_path.
        if not is_email_valid(email):
            raise NotFoundError(email)

        path = self._path_for(email)
        with self._lock:
            start = perf_counter()
            try:
                raw = path.read_bytes()
            except (FileNotFoundError, IsADirectoryError) as exc:
                raise NotFoundError(email) from exc
            except OSError as exc:
                raise StorageError(f"Could not read subscriber {email}: {exc}") from exc
            finally:
                metrics.observe_read(cache_hit=False, elapsed_ms=(perf_counter() - start) * 1000.0)

        try:
            subscriber = subscriber_from_record(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            raise DeserializationError(f"Stored record for {email} is malformed: {exc}") from exc

        self._cache[email] = subscriber
        return subscriber
