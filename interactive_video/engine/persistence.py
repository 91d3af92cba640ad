"""Progress persistence adapter.

Viewer progress is stored as one opaque string ("suspend data") through an
injected key-value boundary with ``get``/``set``/``commit``. Three
boundaries are provided:

* ``InMemoryKeyValueStore`` - plain dict with staged writes;
* ``ScormApiStore`` - an LMS's SCORM 1.2 API object handed in by the host
  (``LMSGetValue``/``LMSSetValue``/``LMSCommit``);
* ``RestKeyValueStore`` - the progress document of this service, fetched
  with GET and written back with PUT on commit.

A value is only durable once ``commit`` has returned.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol, Sequence

import httpx
from pydantic import ValidationError

from ..models.interaction import InteractionLogRecord, LessonStatus, ViewerProgress
from .errors import CorruptProgress, PersistenceUnavailable

logger = logging.getLogger(__name__)

SUSPEND_DATA_KEY = "cmi.suspend_data"
LESSON_STATUS_KEY = "cmi.core.lesson_status"
SCORE_RAW_KEY = "cmi.core.score.raw"

# SCORM 1.2 caps cmi.suspend_data at 4096 characters
SUSPEND_DATA_LIMIT = 4096


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def commit(self) -> None:
        ...


def encode_progress(progress: ViewerProgress) -> str:
    payload = {
        "currentTime": progress.currentTime,
        "completedInteractionIds": list(progress.completedInteractionIds),
    }
    blob = json.dumps(payload, separators=(",", ":"))
    if len(blob) > SUSPEND_DATA_LIMIT:
        logger.warning(
            "Suspend data is %d characters, above the SCORM 1.2 limit of %d",
            len(blob), SUSPEND_DATA_LIMIT,
        )
    return blob


def decode_progress(raw: str) -> ViewerProgress:
    try:
        data = json.loads(raw)
        return ViewerProgress.model_validate(data)
    except (ValueError, TypeError, ValidationError) as exc:
        raise CorruptProgress(f"Unreadable suspend data: {exc}", raw) from exc


class InMemoryKeyValueStore:
    """Dict-backed boundary; ``set`` stages, ``commit`` makes it durable."""

    records_interactions = True

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self._staged: Dict[str, str] = {}
        self.commits = 0

    def get(self, key: str) -> Optional[str]:
        if key in self._staged:
            return self._staged[key]
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self._staged[key] = value

    def commit(self) -> None:
        self.data.update(self._staged)
        self._staged.clear()
        self.commits += 1

    @property
    def pending(self) -> Dict[str, str]:
        return dict(self._staged)


def _lms_ok(result: Any) -> bool:
    if isinstance(result, str):
        return result.strip().lower() == "true"
    return bool(result)


class ScormApiStore:
    """Boundary over a SCORM 1.2 runtime API object supplied by the host."""

    records_interactions = True

    def __init__(self, api: Any):
        self.api = api
        self.initialized = False

    def initialize(self) -> bool:
        if self.initialized:
            return True
        self.initialized = _lms_ok(self.api.LMSInitialize(""))
        if not self.initialized:
            logger.warning("LMSInitialize failed: error %s", self._last_error())
        return self.initialized

    def finish(self) -> None:
        if not self.initialized:
            return
        self.api.LMSFinish("")
        self.initialized = False

    def get(self, key: str) -> Optional[str]:
        value = self.api.LMSGetValue(key)
        return value or None

    def set(self, key: str, value: str) -> None:
        if not _lms_ok(self.api.LMSSetValue(key, value)):
            raise PersistenceUnavailable(
                f"LMSSetValue({key}) failed: error {self._last_error()}"
            )

    def commit(self) -> None:
        if not _lms_ok(self.api.LMSCommit("")):
            raise PersistenceUnavailable(f"LMSCommit failed: error {self._last_error()}")

    def _last_error(self) -> str:
        getter = getattr(self.api, "LMSGetLastError", None)
        return str(getter()) if getter else "unknown"


class RestKeyValueStore:
    """Boundary over ``GET``/``PUT /api/v1/progress/{video_id}``."""

    # The progress document has no place for cmi.interactions.N.*
    records_interactions = False

    FIELDS = {
        SUSPEND_DATA_KEY: "suspendData",
        LESSON_STATUS_KEY: "lessonStatus",
        SCORE_RAW_KEY: "scoreRaw",
    }

    def __init__(
        self,
        base_url: str,
        video_id: str,
        user_id: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
    ):
        headers = {"X-User-Id": user_id} if user_id else {}
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self.path = f"/api/v1/progress/{video_id}"
        self.headers = headers
        self._document: Optional[Dict[str, Any]] = None
        self._staged: Dict[str, Any] = {}

    def _field(self, key: str) -> str:
        try:
            return self.FIELDS[key]
        except KeyError:
            raise KeyError(f"Unsupported progress key: {key}") from None

    def _fetch(self) -> Dict[str, Any]:
        if self._document is None:
            try:
                response = self.client.get(self.path, headers=self.headers)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise PersistenceUnavailable(f"Progress fetch failed: {exc}") from exc
            try:
                document = response.json()
            except ValueError as exc:
                raise PersistenceUnavailable(
                    f"Progress fetch returned no JSON document: {exc}"
                ) from exc
            if not isinstance(document, dict):
                raise PersistenceUnavailable("Progress fetch returned no JSON document")
            self._document = document
        return self._document

    def get(self, key: str) -> Optional[str]:
        field = self._field(key)
        if field in self._staged:
            value = self._staged[field]
        else:
            value = self._fetch().get(field)
        if value is None or value == "":
            return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        field = self._field(key)
        self._staged[field] = int(value) if field == "scoreRaw" else value

    def commit(self) -> None:
        if not self._staged:
            return
        document = {**self._fetch(), **self._staged}
        try:
            response = self.client.put(self.path, json=document, headers=self.headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise PersistenceUnavailable(f"Progress save failed: {exc}") from exc
        self._document = document
        self._staged.clear()


class ProgressStore:
    """save/load of ``ViewerProgress`` under the suspend-data key."""

    def __init__(self, store: KeyValueStore, key: str = SUSPEND_DATA_KEY):
        self.store = store
        self.key = key
        # Last unreadable blob, kept for diagnostics until a save succeeds
        self.corrupt_blob: Optional[str] = None

    def save(self, progress: ViewerProgress) -> None:
        blob = encode_progress(progress)
        try:
            self.store.set(self.key, blob)
            self.store.commit()
        except PersistenceUnavailable:
            raise
        except Exception as exc:
            raise PersistenceUnavailable(f"Saving progress failed: {exc}") from exc
        self.corrupt_blob = None

    def load_strict(self) -> Optional[ViewerProgress]:
        raw = self.store.get(self.key)
        if not raw:
            return None
        return decode_progress(raw)

    def load(self) -> Optional[ViewerProgress]:
        try:
            return self.load_strict()
        except CorruptProgress as exc:
            logger.warning("Discarding corrupt progress: %s", exc)
            self.corrupt_blob = exc.raw
            return None


class ScormReporter:
    """Writes lesson status, raw score and the interaction log.

    Interaction records go to ``cmi.interactions.N.*`` by position, so a
    record written once is never rewritten. By default they are written only
    when the store declares ``records_interactions``.
    """

    def __init__(self, store: KeyValueStore, record_interactions: Optional[bool] = None):
        self.store = store
        if record_interactions is None:
            record_interactions = getattr(store, "records_interactions", True)
        self.record_interactions = record_interactions
        self._written = 0

    def report(
        self,
        status: LessonStatus,
        score: int,
        log: Sequence[InteractionLogRecord] = (),
    ) -> None:
        try:
            self.store.set(LESSON_STATUS_KEY, status.value)
            self.store.set(SCORE_RAW_KEY, str(score))
            if self.record_interactions:
                for index in range(self._written, len(log)):
                    self._write_interaction(index, log[index])
            self.store.commit()
        except PersistenceUnavailable:
            raise
        except Exception as exc:
            raise PersistenceUnavailable(f"Reporting status failed: {exc}") from exc
        if self.record_interactions:
            self._written = len(log)

    def _write_interaction(self, index: int, record: InteractionLogRecord) -> None:
        prefix = f"cmi.interactions.{index}"
        self.store.set(f"{prefix}.id", record.id)
        self.store.set(f"{prefix}.type", record.type)
        self.store.set(f"{prefix}.result", record.result)
        self.store.set(f"{prefix}.student_response", record.studentResponse)
        self.store.set(f"{prefix}.correct_responses.0.pattern", record.correctResponse)
