"""
Remembers the last filter selection between sessions.

Two places hold the four filter keys (reg, batch, dept, yearSem):
    - the page's query string (shareable links)
    - a small JSON key-value file (FILTER_STORE)

On load the query string wins, then the store, then "". On save every key
goes to the store and only non-empty keys go into the query string.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from urllib.parse import parse_qsl, urlencode

from app.config import FILTER_STORE
from resolver.errors import ValidationError
from resolver.models import FilterState, parse_year_sem

log = logging.getLogger(__name__)

KEYS = ("reg", "batch", "dept", "yearSem")


class FilterStore:
    """JSON-file key-value store, read and written whole."""

    def __init__(self, path: Path = FILTER_STORE):
        self.path = path

    def load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError as exc:
            log.warning("Ignoring unreadable filter store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: str(v) for k, v in data.items() if k in KEYS}

    def save(self, values: Mapping[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({k: values.get(k, "") for k in KEYS}, indent=2), encoding="utf-8"
        )


def state_to_params(state: FilterState) -> dict[str, str]:
    return {
        "reg":     state.regulation,
        "batch":   state.batch,
        "dept":    state.department,
        "yearSem": state.year_sem.key if state.year_sem else "",
    }


def params_to_state(params: Mapping[str, str]) -> FilterState:
    """
    Build a FilterState from persisted keys.

    A stored yearSem that no longer parses is dropped rather than failing
    the whole restore.
    """
    try:
        year_sem = parse_year_sem(params.get("yearSem", ""))
    except ValidationError as exc:
        log.warning("Discarding stored yearSem: %s", exc)
        year_sem = None
    return FilterState(
        regulation=params.get("reg", ""),
        batch=params.get("batch", ""),
        department=params.get("dept", ""),
        year_sem=year_sem,
    )


def load_filters(
    query: Mapping[str, str] | str | None, store: FilterStore | None = None
) -> FilterState:
    """Restore the selection: query string first, then the store (if any)."""
    if isinstance(query, str):
        query = dict(parse_qsl(query.lstrip("?")))
    query = query or {}
    stored = store.load() if store is not None else {}
    merged = {k: query.get(k) or stored.get(k) or "" for k in KEYS}
    return params_to_state(merged)


def query_string(state: FilterState) -> str:
    """Query string for the selection, without empty keys."""
    return urlencode({k: v for k, v in state_to_params(state).items() if v})


def save_filters(state: FilterState, store: FilterStore) -> str:
    """Write the selection to the store and return the matching query string."""
    store.save(state_to_params(state))
    return query_string(state)
