from __future__ import annotations

import itertools
import json
from pathlib import Path

import pytest

from flashai.engine.types import CardDraft, Deck
from flashai.paths import get_paths
from flashai.services.content import ContentService
from flashai.services.generator import GeneratedDeck
from flashai.services.library import LibraryError, LibraryService


def _library(path: Path) -> LibraryService:
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    counter = itertools.count(1)
    return LibraryService(path, content, id_factory=lambda: f"id{next(counter)}", clock=lambda: 1_700_000_000_000)


def _drafts() -> list[CardDraft]:
    return [
        CardDraft(word=" Apple ", definition="Quả táo", example="An apple a day.", pronunciation="/ˈæp.əl/"),
        CardDraft(word="", definition="orphan definition"),
        CardDraft(word="Pear", definition="   "),
        CardDraft(word="Grape", definition="Quả nho", pronunciation=""),
    ]


def _make_deck(lib: LibraryService, title: str, *, public: bool, folder: str = ""):
    deck = lib.build_deck(title=title, description="", folder=folder, is_public=public, drafts=_drafts())
    return lib.save_deck(deck)


def test_first_run_seeds_sample_decks(tmp_path: Path) -> None:
    path = tmp_path / "library.json"
    lib = _library(path)
    assert path.exists()
    assert [d.id for d in lib.data.decks] == ["sample-1"]
    assert lib.current_user is None


def test_register_login_logout(tmp_path: Path) -> None:
    lib = _library(tmp_path / "library.json")
    user = lib.register("alice", "pw", "Alice A")
    assert lib.current_user == user

    with pytest.raises(LibraryError, match="Username already exists"):
        lib.register("alice", "other", "Alice B")
    with pytest.raises(LibraryError, match="All fields are required"):
        lib.register("bob", "", "Bob")

    lib.logout()
    assert lib.current_user is None
    with pytest.raises(LibraryError, match="Invalid username or password"):
        lib.login("alice", "wrong")
    assert lib.login("alice", "pw").id == user.id


def test_session_and_decks_survive_reload(tmp_path: Path) -> None:
    path = tmp_path / "library.json"
    lib = _library(path)
    lib.register("alice", "pw", "Alice")
    deck = _make_deck(lib, "Fruit", public=False)

    again = _library(path)
    assert again.current_user is not None
    assert again.current_user.username == "alice"
    reloaded = again.get_deck(deck.id)
    assert reloaded == deck


def test_build_deck_drops_incomplete_rows(tmp_path: Path) -> None:
    lib = _library(tmp_path / "library.json")
    lib.register("alice", "pw", "Alice")
    deck = lib.build_deck(title="  Fruit  ", description="", folder="  ", is_public=True, drafts=_drafts())
    assert deck.title == "Fruit"
    assert deck.folder == "General"
    assert deck.created_at == 1_700_000_000_000
    assert [c.word for c in deck.cards] == ["Apple", "Grape"]
    assert deck.cards[0].pronunciation == "/ˈæp.əl/"
    assert deck.cards[1].pronunciation is None
    assert deck.author_name == "Alice"
    assert deck.user_id == lib.current_user.id  # type: ignore[union-attr]


def test_build_deck_rejects_empty_forms(tmp_path: Path) -> None:
    lib = _library(tmp_path / "library.json")
    with pytest.raises(LibraryError, match="log in"):
        lib.build_deck(title="T", description="", folder="", is_public=False, drafts=_drafts())
    lib.register("alice", "pw", "Alice")
    with pytest.raises(LibraryError, match="title"):
        lib.build_deck(title=" ", description="", folder="", is_public=False, drafts=_drafts())
    with pytest.raises(LibraryError, match="at least one card"):
        lib.build_deck(
            title="T", description="", folder="", is_public=False, drafts=[CardDraft(word="x", definition="")]
        )


def test_editing_keeps_identity(tmp_path: Path) -> None:
    lib = _library(tmp_path / "library.json")
    lib.register("alice", "pw", "Alice")
    original = _make_deck(lib, "Fruit", public=False, folder="Food")
    edited = lib.build_deck(
        title="Fruit v2",
        description="more",
        folder="Food",
        is_public=True,
        drafts=[CardDraft(word="Kiwi", definition="Quả kiwi")],
        existing=original,
    )
    lib.save_deck(edited)
    stored = lib.get_deck(original.id)
    assert stored is not None
    assert stored.title == "Fruit v2"
    assert stored.created_at == original.created_at
    assert [c.word for c in stored.cards] == ["Kiwi"]
    assert len(lib.my_decks()) == 1


def test_only_owner_may_edit_or_delete(tmp_path: Path) -> None:
    lib = _library(tmp_path / "library.json")
    lib.register("alice", "pw", "Alice")
    deck = _make_deck(lib, "Fruit", public=True)
    lib.logout()
    lib.register("bob", "pw", "Bob")

    assert not lib.can_edit(deck)
    with pytest.raises(LibraryError, match="your own decks"):
        lib.delete_deck(deck.id)
    with pytest.raises(LibraryError, match="your own decks"):
        lib.delete_deck("sample-1")
    with pytest.raises(LibraryError, match="Deck not found"):
        lib.delete_deck("missing")
    with pytest.raises(LibraryError, match="your own decks"):
        lib.build_deck(title="Mine now", description="", folder="", is_public=True, drafts=_drafts(), existing=deck)


def test_delete_own_deck(tmp_path: Path) -> None:
    lib = _library(tmp_path / "library.json")
    lib.register("alice", "pw", "Alice")
    deck = _make_deck(lib, "Fruit", public=False)
    lib.delete_deck(deck.id)
    assert lib.get_deck(deck.id) is None
    assert lib.my_decks() == []


def test_community_feed(tmp_path: Path) -> None:
    lib = _library(tmp_path / "library.json")
    lib.register("alice", "pw", "Alice")
    shared = _make_deck(lib, "Shared", public=True)
    _make_deck(lib, "Private", public=False)
    lib.logout()
    lib.register("bob", "pw", "Bob")
    _make_deck(lib, "Bob's", public=True)

    feed = [d.id for d in lib.community_decks()]
    assert feed == ["sample-1", shared.id]


def test_folders_and_grouping(tmp_path: Path) -> None:
    lib = _library(tmp_path / "library.json")
    lib.register("alice", "pw", "Alice")
    _make_deck(lib, "A", public=False, folder="Travel")
    _make_deck(lib, "B", public=False, folder="IELTS")
    _make_deck(lib, "C", public=False)

    assert lib.folders() == ["General", "IELTS", "Travel"]
    grouped = LibraryService.decks_by_folder(lib.my_decks() + lib.community_decks())
    assert list(grouped) == ["English Basics", "General", "IELTS", "Travel"]
    assert [d.title for d in grouped["English Basics"]] == ["Common Fruits"]


def test_deck_from_generated(tmp_path: Path) -> None:
    lib = _library(tmp_path / "library.json")
    lib.register("alice", "pw", "Alice")
    generated = GeneratedDeck(
        title="Kitchen",
        description="Things in a kitchen",
        cards=(CardDraft(word="Spoon", definition="Cái thìa", example="Pass me a spoon.", pronunciation="/spuːn/"),),
    )
    deck = lib.save_deck(lib.deck_from_generated(generated, folder="Home", is_public=True))
    assert lib.my_decks()[0].id == deck.id
    assert deck.folder == "Home"
    assert deck.cards[0].pronunciation == "/spuːn/"


def test_corrupt_library_file(tmp_path: Path) -> None:
    path = tmp_path / "library.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(LibraryError, match="corrupt"):
        _library(path)

    path.write_text('{"version": 1, "users": "nope", "decks": []}', encoding="utf-8")
    with pytest.raises(LibraryError):
        _library(path)


def test_hand_edited_deck_with_repeated_card_ids(tmp_path: Path) -> None:
    path = tmp_path / "library.json"
    deck = {
        "id": "d1",
        "title": "Dup",
        "cards": [
            {"id": "x", "word": "apple", "definition": "táo"},
            {"id": "x", "word": "pear", "definition": "lê"},
        ],
    }
    path.write_text(json.dumps({"version": 1, "users": [], "decks": [deck]}), encoding="utf-8")
    with pytest.raises(LibraryError, match="Duplicate card id x"):
        _library(path)


def test_decks_without_folder_are_grouped_last() -> None:
    decks = [
        Deck(id="a", title="Loose", cards=()),
        Deck(id="b", title="Zoo", cards=(), folder="Zoo"),
        Deck(id="c", title="Air", cards=(), folder="Airport"),
        Deck(id="d", title="Loose too", cards=(), folder=""),
    ]
    grouped = LibraryService.decks_by_folder(decks)
    assert list(grouped) == ["Airport", "Zoo", "Uncategorized"]
    assert [d.id for d in grouped["Uncategorized"]] == ["a", "d"]
