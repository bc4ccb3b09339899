"""Savings aggregation over flyer price matches."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

import yaml
from pydantic import TypeAdapter

from src.grocery.models import PriceMatch, StorePrice

_MATCH_LIST = TypeAdapter(list[PriceMatch])


def best_deal(match: PriceMatch) -> StorePrice:
    """The store offering the lowest price for a matched item.

    The first store wins ties.
    """
    return min(match.stores, key=lambda store: store.price)


def total_savings(matches: Iterable[PriceMatch]) -> float:
    """Sum of savings when every item is bought at its best deal."""
    return round(sum(best_deal(match).savings or 0.0 for match in matches), 2)


def savings_by_store(matches: Iterable[PriceMatch]) -> dict[str, float]:
    """Total advertised savings per store across all matches."""
    totals: dict[str, float] = {}
    for match in matches:
        for store in match.stores:
            totals[store.store] = round(
                totals.get(store.store, 0.0) + (store.savings or 0.0), 2
            )
    return totals


def top_store(matches: Iterable[PriceMatch]) -> tuple[str, float] | None:
    """Store with the highest total savings, or None without matches."""
    totals = savings_by_store(matches)
    if not totals:
        return None
    return max(totals.items(), key=lambda item: item[1])


def load_matches(path: Path | str) -> list[PriceMatch]:
    """Load price matches from a YAML or JSON file.

    The file holds either a list of matches or a mapping with a
    ``matches`` key.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be parsed.
        pydantic.ValidationError: If a match is malformed.
    """
    matches_path = Path(path)
    if not matches_path.exists():
        raise FileNotFoundError(f"Matches file not found: {matches_path}")

    raw = matches_path.read_text(encoding="utf-8")
    if matches_path.suffix.lower() == ".json":
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON matches file: {matches_path}") from e
    else:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML matches file: {matches_path}") from e

    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("matches", [])
    if not isinstance(data, list):
        raise ValueError(f"Matches must be a list: {matches_path}")

    return _MATCH_LIST.validate_python(data)
