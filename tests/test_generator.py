from __future__ import annotations

import json
from dataclasses import dataclass, field

import google.generativeai as genai
import pytest
from google.api_core import exceptions as google_exceptions

from flashai.paths import get_paths
from flashai.services.content import ContentService
from flashai.services.generator import (
    DeckGenerator,
    GenerationError,
    GenerationParams,
    build_prompt,
    response_schema,
)


@dataclass
class _Response:
    text: str


@dataclass
class _FakeModel:
    text: str = ""
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)

    def generate_content(self, prompt: str) -> _Response:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return _Response(self.text)


def _schema() -> dict[str, object]:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir).schema("generated_deck.schema.json")


def _payload(**overrides: object) -> str:
    body: dict[str, object] = {
        "title": "Kitchen Tools",
        "description": "Things you find in a kitchen",
        "cards": [
            {"word": "Spoon", "pronunciation": "/spuːn/", "definition": "Cái thìa", "example": "Use a spoon."},
            {"word": "Ladle", "pronunciation": "/ˈleɪ.dəl/", "definition": "Cái muôi", "example": "Grab the ladle."},
        ],
    }
    body.update(overrides)
    return json.dumps(body, ensure_ascii=False)


def _params() -> GenerationParams:
    return GenerationParams.from_levels("Kitchen utensils", 2, ["A2", "B1"])


def test_generate_parses_model_output() -> None:
    model = _FakeModel(text=_payload())
    gen = DeckGenerator(model=model, schema=_schema())
    deck = gen.generate(_params())

    assert deck.title == "Kitchen Tools"
    assert [c.word for c in deck.cards] == ["Spoon", "Ladle"]
    assert deck.cards[0].pronunciation == "/spuːn/"
    assert deck.cards[1].definition == "Cái muôi"

    prompt = model.prompts[0]
    assert "Topic: Kitchen utensils" in prompt
    assert "Level: A2, B1" in prompt
    assert "Number of words: 2" in prompt


def test_prompt_asks_for_vietnamese_definitions() -> None:
    prompt = build_prompt(GenerationParams(topic="Travel", count=5, level="C1"))
    assert "VIETNAMESE" in prompt
    assert "IPA" in prompt


@pytest.mark.parametrize(
    "text",
    [
        "not json at all",
        _payload(cards=[]),
        _payload(cards=[{"word": "Spoon"}]),
        _payload(title=""),
    ],
)
def test_malformed_output_raises(text: str) -> None:
    gen = DeckGenerator(model=_FakeModel(text=text), schema=_schema())
    with pytest.raises(GenerationError):
        gen.generate(_params())


def test_empty_response_raises() -> None:
    gen = DeckGenerator(model=_FakeModel(text=""), schema=_schema())
    with pytest.raises(GenerationError, match="No response"):
        gen.generate(_params())


def test_blank_cards_are_dropped_without_schema() -> None:
    gen = DeckGenerator(model=_FakeModel())
    deck = gen.parse(json.dumps({"cards": [{"word": "Cup", "definition": "Cái cốc"}, {"word": " ", "definition": "x"}]}))
    assert deck.title == "Untitled deck"
    assert [c.word for c in deck.cards] == ["Cup"]
    assert deck.cards[0].pronunciation is None

    with pytest.raises(GenerationError, match="missing its cards"):
        gen.parse(json.dumps({"title": "Nothing"}))
    with pytest.raises(GenerationError, match="no usable cards"):
        gen.parse(json.dumps({"cards": [{"word": "", "definition": ""}]}))


def test_api_errors_are_wrapped() -> None:
    model = _FakeModel(error=google_exceptions.ServiceUnavailable("overloaded"))
    gen = DeckGenerator(model=model)
    with pytest.raises(GenerationError, match="Gemini request failed"):
        gen.generate(_params())


def test_params_are_checked_before_calling_the_model() -> None:
    model = _FakeModel(text=_payload())
    gen = DeckGenerator(model=model)
    with pytest.raises(GenerationError, match="Topic is required"):
        gen.generate(GenerationParams(topic="  ", count=5, level="B1"))
    with pytest.raises(GenerationError, match="between 1 and 50"):
        gen.generate(GenerationParams(topic="Food", count=51, level="B1"))
    with pytest.raises(GenerationError, match="between 1 and 50"):
        gen.generate(GenerationParams(topic="Food", count=0, level="B1"))
    with pytest.raises(GenerationError, match="proficiency level"):
        GenerationParams.from_levels("Food", 5, [])
    assert model.prompts == []


def test_missing_api_key() -> None:
    with pytest.raises(GenerationError, match="API key"):
        DeckGenerator(api_key=None)


def test_response_schema_keeps_only_gemini_fields() -> None:
    shape = response_schema(_schema())
    assert shape["type"] == "OBJECT"
    assert shape["required"] == ["title", "description", "cards"]
    cards = shape["properties"]["cards"]  # type: ignore[index]
    assert cards == {
        "type": "ARRAY",
        "items": {
            "type": "OBJECT",
            "properties": {
                "word": {"type": "STRING"},
                "definition": {"type": "STRING", "description": "Definition in Vietnamese"},
                "example": {"type": "STRING"},
                "pronunciation": {"type": "STRING", "description": "IPA format"},
            },
            "required": ["word", "definition", "example", "pronunciation"],
        },
    }
    assert "$schema" not in shape
    assert "minItems" not in cards


def test_model_is_asked_for_the_deck_shape(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: dict[str, object] = {}
    monkeypatch.setattr(genai, "configure", lambda **kw: calls.update(configure=kw))

    def _model(name: str, generation_config: dict) -> _FakeModel:
        calls["model"] = name
        calls["generation_config"] = generation_config
        return _FakeModel(text=_payload())

    monkeypatch.setattr(genai, "GenerativeModel", _model)
    gen = DeckGenerator(api_key="k", schema=_schema())

    assert calls["configure"] == {"api_key": "k"}
    assert calls["model"] == "gemini-2.5-flash"
    config = calls["generation_config"]
    assert config["response_mime_type"] == "application/json"  # type: ignore[index]
    assert config["response_schema"] == response_schema(_schema())  # type: ignore[index]
    assert gen.generate(_params()).title == "Kitchen Tools"
