from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from pydantic import TypeAdapter, ValidationError

from ...utils.identifiers import generate_record_id, generate_uuid7
from ..events.broker import EventBroker, StoreEvent
from ..storage.services import SlotStorageError, SlotStore
from .schemas import User, UserCreate, UserStatus
from .seed import seed_users

logger = logging.getLogger(__name__)

USERS_SLOT = os.getenv("USERS_SLOT_NAME", "certify-one-users")

_user_list_adapter = TypeAdapter(List[User])


class DuplicateEmailError(ValueError):
    def __init__(self, email: str) -> None:
        super().__init__(f"A user with email {email} already exists.")
        self.email = email


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _email_key(email: str) -> str:
    return email.strip().lower()


def _matches(user: User, term: str) -> bool:
    needle = term.lower()
    return any(
        needle in value.lower()
        for value in (user.first_name, user.last_name, user.email, user.department)
    )


class UserStore:
    """
    Employee directory kept in one durable slot.

    - Loading never fails: an absent or unreadable slot yields the seed users.
    - Writes are serialized and save the whole list; memory is replaced only
      after the slot write succeeded, otherwise `SlotStorageError` propagates.
    - Emails are unique, compared case-insensitively.
    """

    def __init__(
        self,
        slots: SlotStore,
        *,
        broker: Optional[EventBroker] = None,
        slot_name: str = USERS_SLOT,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._slots = slots
        self._broker = broker
        self.slot_name = slot_name
        self._clock = clock
        self._lock = threading.Lock()
        self._users: List[User] = self._load()

    # -- persistence --------------------------------------------------------

    def _load(self) -> List[User]:
        try:
            raw = self._slots.get(self.slot_name)
        except SlotStorageError as exc:
            logger.warning("User slot unreadable; using seed users", extra={"slot": self.slot_name, "error": str(exc)})
            return seed_users()
        if raw is None:
            return seed_users()
        try:
            return _user_list_adapter.validate_python(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            logger.warning(
                "Stored users are corrupt; using seed users",
                extra={"slot": self.slot_name, "error": str(exc)[:200]},
            )
            return seed_users()

    def _save(self, users: List[User]) -> None:
        payload = _user_list_adapter.dump_python(users, mode="json", by_alias=True, exclude_none=True)
        self._slots.set(self.slot_name, json.dumps(payload))
        self._users = users

    # -- reads --------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._users)

    def list_users(self, *, search: Optional[str] = None, status: Optional[str] = None) -> List[User]:
        term = (search or "").strip()
        wanted = None if status in (None, "", "all") else status
        return [
            user
            for user in self._users
            if (not term or _matches(user, term)) and (wanted is None or user.status.value == wanted)
        ]

    def get(self, user_id: str) -> Optional[User]:
        return next((user for user in self._users if user.id == user_id), None)

    # -- writes -------------------------------------------------------------

    def _ensure_unique_email(self, email: str, *, ignore_id: Optional[str] = None) -> None:
        key = _email_key(email)
        for user in self._users:
            if user.id != ignore_id and _email_key(user.email) == key:
                raise DuplicateEmailError(email)

    def _next_updated_at(self, previous: datetime) -> datetime:
        now = self._clock()
        return now if now > previous else previous + timedelta(microseconds=1)

    def add(self, data: UserCreate) -> User:
        with self._lock:
            self._ensure_unique_email(data.email)
            now = self._clock()
            user = User(
                **data.model_dump(),
                id=generate_record_id({u.id for u in self._users}),
                created_at=now,
                updated_at=now,
            )
            self._save([*self._users, user])
        self._notify("create", user, f"{user.full_name} has been added successfully.")
        return user

    def update(self, user_id: str, data: UserCreate) -> Optional[User]:
        with self._lock:
            current = self.get(user_id)
            if current is None:
                return None
            self._ensure_unique_email(data.email, ignore_id=user_id)
            user = User(
                **data.model_dump(),
                id=current.id,
                created_at=current.created_at,
                updated_at=self._next_updated_at(current.updated_at),
            )
            self._save([user if u.id == user_id else u for u in self._users])
        self._notify("update", user, f"{user.full_name} has been updated successfully.")
        return user

    def delete(self, user_id: str) -> Optional[User]:
        with self._lock:
            current = self.get(user_id)
            if current is None:
                return None
            self._save([u for u in self._users if u.id != user_id])
        self._notify("delete", current, f"{current.full_name} has been deleted.")
        return current

    def toggle_status(self, user_id: str) -> Optional[User]:
        with self._lock:
            current = self.get(user_id)
            if current is None:
                return None
            new_status = UserStatus.INACTIVE if current.status == UserStatus.ACTIVE else UserStatus.ACTIVE
            user = current.model_copy(
                update={"status": new_status, "updated_at": self._next_updated_at(current.updated_at)}
            )
            self._save([user if u.id == user_id else u for u in self._users])
        verb = "activated" if new_status == UserStatus.ACTIVE else "deactivated"
        self._notify("status", user, f"{user.full_name} has been {verb}.")
        return user

    # -- notifications ------------------------------------------------------

    def _notify(self, action: str, user: User, message: str) -> None:
        logger.info(message, extra={"user_id": user.id, "action": action})
        if self._broker is None:
            return
        event_type = {
            "create": "user.created",
            "update": "user.updated",
            "delete": "user.deleted",
            "status": "user.status_changed",
        }[action]
        self._broker.publish(
            StoreEvent(
                id=generate_uuid7(),
                type=event_type,
                entityId=user.id,
                action=action,
                ok=True,
                message=message,
                timestamp=self._clock().isoformat(),
                metadata={"status": user.status.value},
            )
        )
