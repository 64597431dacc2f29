from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from referencing import Registry, Resource

from flashai.engine.serialize import RecordError, deck_from_dict
from flashai.engine.types import Deck


class ContentError(RuntimeError):
    pass


def load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(
    instance: object,
    schema: Mapping[str, object],
    *,
    context: str,
    registry: Registry | None = None,
) -> None:
    if registry is not None:
        validator = Draft202012Validator(schema, registry=registry)
    else:
        validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.absolute_path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


class ContentService:
    """Bundled data and the JSON schemas every stored record is checked against."""

    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir
        self._schemas: dict[str, dict[str, object]] = {}
        self._registry: Registry | None = None

    def schema(self, name: str) -> dict[str, object]:
        if name not in self._schemas:
            raw = load_json(self._schema_dir / name)
            if not isinstance(raw, dict):
                raise ContentError(f"Schema {name} must be an object")
            self._schemas[name] = raw
        return self._schemas[name]

    @property
    def registry(self) -> Registry:
        if self._registry is None:
            resources = []
            for path in sorted(self._schema_dir.glob("*.schema.json")):
                schema = self.schema(path.name)
                uri = schema.get("$id", path.name)
                resources.append((str(uri), Resource.from_contents(schema)))
            self._registry = Registry().with_resources(resources)
        return self._registry

    def validate(self, instance: object, schema_name: str, *, context: str) -> None:
        validate_json(instance, self.schema(schema_name), context=context, registry=self.registry)

    def validate_deck_record(self, raw: object) -> Deck:
        self.validate(raw, "deck.schema.json", context="deck record")
        assert isinstance(raw, dict)
        try:
            return deck_from_dict(raw)
        except RecordError as e:
            raise ContentError(str(e)) from e

    def load_sample_decks(self) -> list[Deck]:
        path = self._data_dir / "decks.json"
        raw = load_json(path)
        self.validate(raw, "decks.schema.json", context=str(path))
        assert isinstance(raw, dict)
        raw_decks = raw.get("decks")
        if not isinstance(raw_decks, list):
            raise ContentError("decks.json.decks must be a list")
        decks: list[Deck] = []
        for item in raw_decks:
            if not isinstance(item, dict):
                continue
            try:
                decks.append(deck_from_dict(item))
            except RecordError as e:
                raise ContentError(f"{path}: {e}") from e
        return decks

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        for path in sorted(self._schema_dir.glob("*.schema.json")):
            try:
                Draft202012Validator.check_schema(self.schema(path.name))
            except SchemaError as e:
                raise ContentError(f"Invalid schema {path.name}: {e.message}") from e
        _ = self.load_sample_decks()
