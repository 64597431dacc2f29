from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from flashai.engine.types import CardDraft
from flashai.services.content import ContentError, validate_json

DEFAULT_MODEL = "gemini-2.5-flash"
MAX_CARDS = 50

LEVELS = ("A1", "A2", "B1", "B2", "C1", "C2")


class GenerationError(RuntimeError):
    pass


@dataclass(frozen=True)
class GenerationParams:
    topic: str
    count: int
    level: str

    @staticmethod
    def from_levels(topic: str, count: int, levels: list[str]) -> "GenerationParams":
        if not levels:
            raise GenerationError("Please select at least one proficiency level.")
        return GenerationParams(topic=topic, count=count, level=", ".join(levels))

    def check(self) -> None:
        if not self.topic.strip():
            raise GenerationError("Topic is required.")
        if not self.level.strip():
            raise GenerationError("Please select at least one proficiency level.")
        if self.count < 1 or self.count > MAX_CARDS:
            raise GenerationError(f"Number of words must be between 1 and {MAX_CARDS}.")


@dataclass(frozen=True)
class GeneratedDeck:
    title: str
    description: str
    cards: tuple[CardDraft, ...]


def build_prompt(params: GenerationParams) -> str:
    return f"""
Act as the Cambridge Dictionary. Create a vocabulary list for learning English.
Topic: {params.topic.strip()}
Level: {params.level}
Number of words: {params.count}

Target Audience: Vietnamese speakers learning English.

Return a structured JSON object with a creative title for the deck, a short description, and the list of words.

For each card:
1. 'word': The English word.
2. 'pronunciation': The IPA (International Phonetic Alphabet) transcription (e.g., /həˈləʊ/).
3. 'definition': The definition translated into VIETNAMESE (Tiếng Việt).
4. 'example': An example sentence in English.
""".strip()


def response_schema(schema: Mapping[str, object]) -> dict[str, object]:
    """Reduce a JSON Schema to the fields Gemini's response schema understands."""
    out: dict[str, object] = {}
    kind = schema.get("type")
    if isinstance(kind, str):
        out["type"] = kind.upper()
    description = schema.get("description")
    if isinstance(description, str):
        out["description"] = description
    props = schema.get("properties")
    if isinstance(props, dict):
        out["properties"] = {k: response_schema(v) for k, v in props.items() if isinstance(v, dict)}
    items = schema.get("items")
    if isinstance(items, dict):
        out["items"] = response_schema(items)
    required = schema.get("required")
    if isinstance(required, list):
        out["required"] = list(required)
    return out


class DeckGenerator:
    """Generates vocabulary decks with a Gemini model.

    `model` may be any object exposing `generate_content(prompt)` returning
    something with a `.text` attribute; when omitted a
    `genai.GenerativeModel` is configured from `api_key`.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str = DEFAULT_MODEL,
        model: Any | None = None,
        schema: Mapping[str, object] | None = None,
    ) -> None:
        self.model_name = model_name
        self._schema = schema
        if model is None:
            if not api_key:
                raise GenerationError("No Gemini API key configured (set GEMINI_API_KEY).")
            genai.configure(api_key=api_key)
            generation_config: dict[str, object] = {"response_mime_type": "application/json"}
            if schema is not None:
                generation_config["response_schema"] = response_schema(schema)
            model = genai.GenerativeModel(model_name, generation_config=generation_config)
        self._model = model

    def generate(self, params: GenerationParams) -> GeneratedDeck:
        params.check()
        try:
            response = self._model.generate_content(build_prompt(params))
            text = response.text
        except google_exceptions.GoogleAPIError as e:
            raise GenerationError(f"Gemini request failed: {e}") from e
        except ValueError as e:
            # response.text raises when the candidate was blocked or empty
            raise GenerationError(f"No usable response from Gemini: {e}") from e
        if not text:
            raise GenerationError("No response generated from Gemini.")
        return self.parse(text)

    def parse(self, text: str) -> GeneratedDeck:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise GenerationError(f"Gemini returned invalid JSON: {e}") from e
        if self._schema is not None:
            try:
                validate_json(raw, self._schema, context="generated deck")
            except ContentError as e:
                raise GenerationError(str(e)) from e
        if not isinstance(raw, dict) or not isinstance(raw.get("cards"), list):
            raise GenerationError("Generated deck is missing its cards.")

        cards: list[CardDraft] = []
        for c in raw["cards"]:
            if not isinstance(c, dict):
                continue
            draft = CardDraft(
                word=str(c.get("word", "")),
                definition=str(c.get("definition", "")),
                example=str(c.get("example", "")),
                pronunciation=str(c["pronunciation"]) if c.get("pronunciation") else None,
            )
            if not draft.is_blank():
                cards.append(draft)
        if not cards:
            raise GenerationError("Generated deck has no usable cards.")
        return GeneratedDeck(
            title=str(raw.get("title", "")).strip() or "Untitled deck",
            description=str(raw.get("description", "")).strip(),
            cards=tuple(cards),
        )
