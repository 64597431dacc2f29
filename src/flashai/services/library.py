from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Mapping, Sequence

from flashai.engine.serialize import RecordError, deck_from_dict, deck_to_dict
from flashai.engine.types import SYSTEM_USER_ID, CardDraft, Deck
from flashai.services.content import ContentError, ContentService

if TYPE_CHECKING:
    from flashai.services.generator import GeneratedDeck

DEFAULT_FOLDER = "General"
UNCATEGORIZED = "Uncategorized"


class LibraryError(RuntimeError):
    pass


@dataclass
class User:
    id: str
    username: str
    password: str  # plain text: local demo accounts only
    full_name: str

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "User":
        uid = d.get("id")
        username = d.get("username")
        if not isinstance(uid, str) or not isinstance(username, str):
            raise LibraryError("Invalid user record")
        return User(
            id=uid,
            username=username,
            password=str(d.get("password", "")),
            full_name=str(d.get("full_name", username)),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "username": self.username,
            "password": self.password,
            "full_name": self.full_name,
        }


@dataclass
class LibraryData:
    version: int = 1
    users: list[User] = field(default_factory=list)
    decks: list[Deck] = field(default_factory=list)
    session: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "users": [u.to_dict() for u in self.users],
            "decks": [deck_to_dict(d) for d in self.decks],
            "session": self.session,
        }


def _new_id() -> str:
    return uuid.uuid4().hex


def _now_ms() -> int:
    return int(time.time() * 1000)


class LibraryService:
    """Users, decks and the login session, kept in one local JSON file."""

    def __init__(
        self,
        library_path: Path,
        content: ContentService,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._path = library_path
        self.content = content
        self._new_id = id_factory
        self._clock = clock
        self.data = self._load_or_create()

    def _load_or_create(self) -> LibraryData:
        if not self._path.exists():
            data = LibraryData(decks=list(self.content.load_sample_decks()))
            self._write(data)
            return data
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            self.content.validate(raw, "library.schema.json", context=str(self._path))
        except json.JSONDecodeError as e:
            raise LibraryError(f"Library file is corrupt: {e}") from e
        except ContentError as e:
            raise LibraryError(str(e)) from e
        assert isinstance(raw, dict)

        users = [User.from_dict(u) for u in raw.get("users", []) if isinstance(u, dict)]
        decks: list[Deck] = []
        for d in raw.get("decks", []):
            if not isinstance(d, dict):
                continue
            try:
                decks.append(deck_from_dict(d))
            except RecordError as e:
                raise LibraryError(f"Invalid deck record: {e}") from e
        session = raw.get("session")
        if not isinstance(session, str) or not any(u.id == session for u in users):
            session = None
        version = raw.get("version", 1)
        return LibraryData(
            version=version if isinstance(version, int) else 1,
            users=users,
            decks=decks,
            session=session,
        )

    def _write(self, data: LibraryData) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")

    def save(self) -> None:
        self._write(self.data)

    # -------- Accounts --------
    @property
    def current_user(self) -> User | None:
        if self.data.session is None:
            return None
        for u in self.data.users:
            if u.id == self.data.session:
                return u
        return None

    def _require_user(self) -> User:
        user = self.current_user
        if user is None:
            raise LibraryError("Please log in first.")
        return user

    def register(self, username: str, password: str, full_name: str) -> User:
        username = username.strip()
        full_name = full_name.strip()
        if not username or not password or not full_name:
            raise LibraryError("All fields are required")
        if any(u.username == username for u in self.data.users):
            raise LibraryError("Username already exists")
        user = User(id=self._new_id(), username=username, password=password, full_name=full_name)
        self.data.users.append(user)
        self.data.session = user.id
        self.save()
        return user

    def login(self, username: str, password: str) -> User:
        for u in self.data.users:
            if u.username == username.strip() and u.password == password:
                self.data.session = u.id
                self.save()
                return u
        raise LibraryError("Invalid username or password")

    def logout(self) -> None:
        self.data.session = None
        self.save()

    # -------- Decks --------
    def get_deck(self, deck_id: str) -> Deck | None:
        for d in self.data.decks:
            if d.id == deck_id:
                return d
        return None

    def can_edit(self, deck: Deck) -> bool:
        user = self.current_user
        return user is not None and deck.user_id == user.id

    def save_deck(self, deck: Deck) -> Deck:
        self.content.validate(deck_to_dict(deck), "deck.schema.json", context=f"deck {deck.id}")
        for i, d in enumerate(self.data.decks):
            if d.id == deck.id:
                if not self.can_edit(d):
                    raise LibraryError("You can only edit your own decks.")
                self.data.decks[i] = deck
                self.save()
                return deck
        self.data.decks.insert(0, deck)
        self.save()
        return deck

    def delete_deck(self, deck_id: str) -> None:
        deck = self.get_deck(deck_id)
        if deck is None:
            raise LibraryError("Deck not found.")
        if not self.can_edit(deck):
            raise LibraryError("You can only edit your own decks.")
        self.data.decks = [d for d in self.data.decks if d.id != deck_id]
        self.save()

    def my_decks(self) -> list[Deck]:
        user = self.current_user
        if user is None:
            return []
        return [d for d in self.data.decks if d.user_id == user.id]

    def community_decks(self) -> list[Deck]:
        user = self.current_user
        me = user.id if user is not None else None
        system = [d for d in self.data.decks if d.user_id == SYSTEM_USER_ID]
        shared = [
            d for d in self.data.decks if d.is_public and d.user_id not in (me, SYSTEM_USER_ID)
        ]
        return system + shared

    def folders(self) -> list[str]:
        return sorted({d.folder for d in self.my_decks() if d.folder})

    @staticmethod
    def decks_by_folder(decks: Iterable[Deck]) -> dict[str, list[Deck]]:
        grouped: dict[str, list[Deck]] = {}
        for d in decks:
            grouped.setdefault(d.folder or UNCATEGORIZED, []).append(d)
        # Uncategorized always last
        return dict(sorted(grouped.items(), key=lambda kv: (kv[0] == UNCATEGORIZED, kv[0])))

    # -------- Building decks from forms --------
    def build_deck(
        self,
        title: str,
        description: str,
        folder: str,
        is_public: bool,
        drafts: Sequence[CardDraft],
        existing: Deck | None = None,
    ) -> Deck:
        """Turn the create/edit form into a deck owned by the current user.

        Rows missing a word or a definition are dropped. Editing keeps the
        deck id and creation time; every card gets a fresh id.
        """
        user = self._require_user()
        if not title.strip():
            raise LibraryError("Please give the deck a title.")
        cards = tuple(d.to_card(self._new_id()) for d in drafts if not d.is_blank())
        if not cards:
            raise LibraryError("Please add at least one card with a word and definition.")
        if existing is not None and not self.can_edit(existing):
            raise LibraryError("You can only edit your own decks.")
        base = existing or Deck(id=self._new_id(), title="", cards=(), created_at=self._clock())
        return replace(
            base,
            title=title.strip(),
            description=description.strip(),
            folder=folder.strip() or DEFAULT_FOLDER,
            is_public=is_public,
            cards=cards,
            user_id=user.id,
            author_name=user.full_name,
        )

    def deck_from_generated(self, generated: "GeneratedDeck", folder: str, is_public: bool) -> Deck:
        return self.build_deck(
            title=generated.title,
            description=generated.description,
            folder=folder,
            is_public=is_public,
            drafts=generated.cards,
        )
