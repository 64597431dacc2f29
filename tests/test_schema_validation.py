from __future__ import annotations

import pytest

from flashai.paths import get_paths
from flashai.services.content import ContentError, ContentService


def _content() -> ContentService:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir)


def test_content_schemas_validate() -> None:
    content = _content()
    content.validate_all()


def test_sample_decks_load() -> None:
    decks = _content().load_sample_decks()
    assert [d.id for d in decks] == ["sample-1"]
    fruits = decks[0]
    assert fruits.title == "Common Fruits"
    assert fruits.user_id == "system"
    assert fruits.is_public
    assert [c.word for c in fruits.cards] == ["Apple", "Banana", "Cucumber"]


def test_deck_record_with_missing_fields_is_rejected() -> None:
    content = _content()
    bad = {"id": "d1", "title": "Broken", "cards": [{"id": "x", "word": "only a word"}]}
    with pytest.raises(ContentError) as exc:
        content.validate_deck_record(bad)
    assert "definition" in str(exc.value)


def test_deck_record_with_unknown_key_is_rejected() -> None:
    content = _content()
    good = {
        "id": "d1",
        "title": "Ok",
        "cards": [{"id": "x", "word": "w", "definition": "d"}],
        "user_id": "u1",
        "author_name": "U",
        "is_public": False,
        "created_at": 0,
    }
    deck = content.validate_deck_record(good)
    assert deck.cards[0].word == "w"

    with pytest.raises(ContentError):
        content.validate_deck_record({**good, "colour": "red"})
