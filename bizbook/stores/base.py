"""
Persistent State Container

DESIGN DECISION: Each store owns exactly one immutable state model.
A mutation builds a new state object and commits it:

1. Replace the in-memory state
2. Write the full snapshot to storage (write-through)
3. Record an audit event
4. Notify subscribers with (new_state, previous_state)

If step 2 raises, the error reaches the caller; memory keeps the
new state and subscribers are not told. Mutations that find nothing
to change never reach commit.
"""

import json
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from bizbook.audit import AuditLogger
from bizbook.models.audit import AuditEvent, AuditEventBuilder
from bizbook.services.storage import (
    CorruptedSnapshotError,
    KeyValueStorageInterface,
    StorageError,
)


StateT = TypeVar("StateT", bound=BaseModel)
ModelT = TypeVar("ModelT", bound=BaseModel)

Listener = Callable[[Any, Any], None]
IdFactory = Callable[[], str]


def new_id() -> str:
    """Default identity generator."""
    return str(uuid4())


def coerce_model(model_cls: type[ModelT], data: Any) -> ModelT:
    """Accept either a model instance or a plain mapping."""
    if isinstance(data, model_cls):
        return data
    if isinstance(data, Mapping):
        return model_cls.model_validate(dict(data))
    raise TypeError(
        f"Expected {model_cls.__name__} or mapping, got {type(data).__name__}"
    )


def merge_patch(record: ModelT, changes: dict[str, Any]) -> ModelT:
    """
    Merge explicitly supplied fields into a record.

    The merged record is re-validated, so a None for a required
    field raises pydantic.ValidationError.
    """
    merged = {**record.model_dump(), **changes}
    return type(record).model_validate(merged)


class PersistentStore(Generic[StateT]):
    """
    Base class for stores backed by one snapshot key.

    Subclasses set state_model and implement _seed_state() and
    _counts().
    """

    state_model: type[StateT]
    default_key: str

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        *,
        key: Optional[str] = None,
        seed: Optional[StateT] = None,
        audit_logger: Optional[AuditLogger] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        """
        Initialize the store and load its snapshot.

        Args:
            storage: Durable key-value medium
            key: Snapshot key; defaults to the store's standard key
            seed: State to start from when no snapshot exists.
                  If None, the illustrative sample data is used.
            audit_logger: Audit sink; a private one is created if None
            id_factory: Identity generator for new records
        """
        self._storage = storage
        self._key = key or self.default_key
        self._seed = seed
        self._audit = audit_logger or AuditLogger()
        self._new_id = id_factory or new_id
        self._listeners: list[Listener] = []
        self._state: StateT = self._load()

    # Read side -------------------------------------------------------------

    @property
    def state(self) -> StateT:
        """Current snapshot. Never modified after it is handed out."""
        return self._state

    @property
    def key(self) -> str:
        return self._key

    # Subscription ----------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called as listener(new_state, previous_state)
        after every committed mutation.

        Returns:
            A callable that unsubscribes the listener
        """
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    # Persistence -----------------------------------------------------------

    def reload(self) -> StateT:
        """Re-read the snapshot from storage, discarding in-memory state."""
        previous = self._state
        self._state = self._load()
        if self._state != previous:
            self._notify(self._state, previous)
        return self._state

    def _load(self) -> StateT:
        raw = self._storage.get(self._key)
        if raw is None:
            state = self._seed if self._seed is not None else self._seed_state()
            self._audit.log(AuditEventBuilder.state_seeded(self._key, self._counts(state)))
            return state

        state = self._decode(raw)
        self._audit.log(AuditEventBuilder.state_loaded(self._key, self._counts(state)))
        return state

    def _decode(self, raw: str) -> StateT:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptedSnapshotError(f"Corrupted JSON under '{self._key}'") from e

        # Snapshots written by the browser app wrap the state in an envelope.
        if isinstance(payload, dict) and isinstance(payload.get("state"), dict):
            payload = payload["state"]

        try:
            return self.state_model.model_validate(payload)
        except ValidationError as e:
            raise CorruptedSnapshotError(
                f"Snapshot under '{self._key}' does not match {self.state_model.__name__}: "
                f"{e.error_count()} errors"
            ) from e

    def _encode(self, state: StateT) -> str:
        return state.model_dump_json(by_alias=True, exclude_none=True)

    def _persist(self) -> None:
        try:
            self._storage.set(self._key, self._encode(self._state))
        except StorageError as e:
            self._audit.log(AuditEventBuilder.persist_failed(self._key, str(e)))
            raise

    # Commit ----------------------------------------------------------------

    def _commit(self, new_state: StateT, event: AuditEvent) -> StateT:
        previous = self._state
        self._state = new_state
        self._persist()
        self._audit.log(event)
        self._notify(new_state, previous)
        return new_state

    def _ignore(
        self,
        operation: str,
        reason: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> StateT:
        self._audit.log(
            AuditEventBuilder.mutation_ignored(
                self._key, operation, reason, entity_type, entity_id
            )
        )
        return self._state

    def _notify(self, new_state: StateT, previous: StateT) -> None:
        # Copy so listeners may unsubscribe while being notified.
        for listener in list(self._listeners):
            listener(new_state, previous)

    # Subclass hooks --------------------------------------------------------

    def _seed_state(self) -> StateT:
        raise NotImplementedError

    def _counts(self, state: StateT) -> dict[str, int]:
        raise NotImplementedError
