"""Directory store: the employee list, loading/saving flags and the edit draft."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable

from employee_directory.core.config import Settings
from employee_directory.models.auth import Identity
from employee_directory.models.employee import (
    DirectoryState,
    EditDraft,
    Employee,
    UpdatePayload,
)
from employee_directory.services.employee_client import EmployeeClient, Err, Ok, employee_client

logger = logging.getLogger(__name__)

Subscriber = Callable[[DirectoryState], None]

# wire names and attribute names both address a draft field
_DRAFT_FIELDS: dict[str, str] = {
    "username": "username",
    "email": "email",
    "phoneNumber": "phone_number",
    "phone_number": "phone_number",
    "password": "password",
}


class DirectoryError(Exception):
    pass


class NoSelectionError(DirectoryError):
    pass


class DirectoryStore:
    """Single owner of one session's directory state.

    Records are replaced wholesale by ``load()``; nothing else writes them,
    except ``save()`` merging a confirmed edit when ``merge_saved_edits`` is on.
    Every change is pushed to subscribers as a ``DirectoryState`` snapshot.
    """

    def __init__(
        self,
        identity: Identity,
        client: EmployeeClient,
        *,
        merge_saved_edits: bool = True,
    ) -> None:
        self.identity = identity
        self._client = client
        self._merge_saved_edits = merge_saved_edits
        self._records: list[Employee] = []
        self._loading = False
        self._selected: Employee | None = None
        self._draft: EditDraft | None = None
        self._saving = False
        self._subscribers: list[Subscriber] = []

    @property
    def state(self) -> DirectoryState:
        return DirectoryState(
            records=list(self._records),
            loading=self._loading,
            selected=self._selected,
            draft=self._draft.model_copy() if self._draft else None,
            saving=self._saving,
        )

    @property
    def records(self) -> list[Employee]:
        return list(self._records)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def saving(self) -> bool:
        return self._saving

    @property
    def selected(self) -> Employee | None:
        return self._selected

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        if not self._subscribers:
            return
        snapshot = self.state
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Directory subscriber failed")

    def find(self, employee_tag: str) -> Employee | None:
        return next((r for r in self._records if r.employee_tag == employee_tag), None)

    async def load(self) -> bool:
        if self._loading:
            logger.debug("Employee fetch already in flight — skipping")
            return False

        self._loading = True
        self._notify()
        try:
            result = await self._client.fetch_employees(self.identity.token)
            if isinstance(result, Ok):
                self._records = list(result.value)
                logger.info("Loaded %d employees", len(self._records))
            else:
                logger.error("Error fetching employees (%s): %s", result.kind.value, result.message)
        finally:
            self._loading = False
            self._notify()

        return isinstance(result, Ok)

    def select(self, employee: Employee) -> None:
        self._selected = employee
        self._draft = EditDraft.from_employee(employee)
        self._notify()

    def deselect(self) -> None:
        self._clear_selection()
        self._notify()

    def _clear_selection(self) -> None:
        self._selected = None
        self._draft = None

    def update_draft_field(self, name: str, value: str) -> None:
        attr = _DRAFT_FIELDS.get(name)
        if attr is None:
            raise ValueError(f"Unknown draft field: {name}")
        if self._draft is None:
            raise NoSelectionError("No employee selected for editing")

        setattr(self._draft, attr, value)
        self._notify()

    async def save(self) -> Ok[None] | Err | None:
        if self._selected is None or self._draft is None:
            return None
        if self._saving:
            logger.warning("Save already in progress for %s — ignoring", self._selected.employee_tag)
            return None

        employee = self._selected
        payload = UpdatePayload.from_draft(employee, self._draft)

        self._saving = True
        self._notify()
        try:
            result = await self._client.update_employee(self.identity.token, payload)
            if isinstance(result, Ok):
                logger.info("Updated employee %s", employee.employee_tag)
                if self._merge_saved_edits:
                    self._merge_saved(payload)
            else:
                logger.error(
                    "Error saving employee %s (%s): %s",
                    employee.employee_tag,
                    result.kind.value,
                    result.message,
                )
        finally:
            # the edit closes whether or not the service accepted it
            self._clear_selection()
            self._saving = False
            self._notify()

        return result

    def _merge_saved(self, payload: UpdatePayload) -> None:
        changes = {
            "username": payload.username,
            "email": payload.email,
            "phone_number": payload.phone_number,
        }
        self._records = [
            record.model_copy(update=changes) if record.employee_tag == payload.employees_tag else record
            for record in self._records
        ]


class DirectorySessions:
    """One directory store per bearer token.

    Stores idle longer than ``idle_ttl_seconds`` are dropped on the next
    lookup, and the least recently used store goes once ``max_sessions`` is
    reached. Callers without a token get a fresh store that is never kept.
    """

    def __init__(
        self,
        client: EmployeeClient,
        *,
        max_sessions: int = 256,
        idle_ttl_seconds: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._stores: OrderedDict[str, tuple[DirectoryStore, float]] = OrderedDict()
        self._clock = clock
        self.max_sessions = max_sessions
        self.idle_ttl_seconds = idle_ttl_seconds
        self.merge_saved_edits = True

    def configure(self, settings: Settings) -> None:
        self.merge_saved_edits = settings.MERGE_SAVED_EDITS
        self.max_sessions = settings.SESSION_MAX_STORES
        self.idle_ttl_seconds = settings.SESSION_IDLE_TTL_SECONDS

    def get_or_create(self, identity: Identity) -> tuple[DirectoryStore, bool]:
        if not identity.token:
            return self._new_store(identity), True

        now = self._clock()
        self._evict_idle(now)

        entry = self._stores.pop(identity.token, None)
        if entry is not None:
            store = entry[0]
            self._stores[identity.token] = (store, now)
            return store, False

        while self._stores and len(self._stores) >= self.max_sessions:
            token, _ = self._stores.popitem(last=False)
            logger.info("Session limit reached, dropping store for %s...", token[:8])

        store = self._new_store(identity)
        self._stores[identity.token] = (store, now)
        return store, True

    def _new_store(self, identity: Identity) -> DirectoryStore:
        return DirectoryStore(identity, self._client, merge_saved_edits=self.merge_saved_edits)

    def _evict_idle(self, now: float) -> None:
        cutoff = now - self.idle_ttl_seconds
        # entries are kept in last-used order, oldest first
        while self._stores:
            token, (store, last_used) = next(iter(self._stores.items()))
            if last_used > cutoff or store.saving or store.loading:
                break
            del self._stores[token]
            logger.debug("Dropped idle store for %s...", token[:8])

    def get(self, token: str) -> DirectoryStore | None:
        entry = self._stores.get(token)
        return entry[0] if entry is not None else None

    def discard(self, token: str) -> bool:
        return self._stores.pop(token, None) is not None

    def clear(self) -> None:
        self._stores.clear()

    def __len__(self) -> int:
        return len(self._stores)


directory_sessions = DirectorySessions(employee_client)
