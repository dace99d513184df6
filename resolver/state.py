"""
Filter state transitions.

apply_filter_change(state, field, value) → new FilterState
drop_unlisted(state, metadata)          → FilterState without unknown dataset values

Rules:
  - regulation / batch / department: set the value and clear yearSem and the
    selected class, since both depend on the dataset the change will reload.
  - yearSem: parsed from "Y-S" ("" clears it).
  - class: sets current_class_id only.
  - when metadata is given, regulation/batch/department values must be one
    of the values it enumerates ("" always allowed).

FilterState is frozen; every transition returns a fresh copy.
"""

import logging

from resolver.errors import ValidationError
from resolver.models import FilterState, Metadata, parse_year_sem

log = logging.getLogger(__name__)

# Field names accepted by apply_filter_change, mapped to FilterState attributes.
# The short forms match the persisted keys.
FIELDS = {
    "regulation": "regulation",
    "reg":        "regulation",
    "batch":      "batch",
    "department": "department",
    "dept":       "department",
    "yearSem":    "year_sem",
    "year_sem":   "year_sem",
    "class":      "current_class_id",
    "class_id":   "current_class_id",
}

DATASET_FIELDS = ("regulation", "batch", "department")


def apply_filter_change(
    state: FilterState,
    field: str,
    value: str,
    metadata: Metadata | None = None,
) -> FilterState:
    attr = FIELDS.get(field)
    if attr is None:
        raise ValidationError(field, "unknown filter field")

    value = (value or "").strip()

    if attr in DATASET_FIELDS:
        if metadata is not None and value and value not in metadata.allowed(attr):
            raise ValidationError(attr, f"{value!r} is not listed in metadata.json")
        return state.model_copy(update={attr: value, "year_sem": None, "current_class_id": ""})

    if attr == "year_sem":
        return state.model_copy(update={"year_sem": parse_year_sem(value)})

    return state.model_copy(update={"current_class_id": value})


def dataset_key(state: FilterState) -> tuple[str, str, str]:
    """The part of the state that decides which documents are loaded."""
    return state.regulation, state.batch, state.department


def drop_unlisted(state: FilterState, metadata: Metadata) -> FilterState:
    """
    Clear regulation/batch/department values metadata does not list.

    Used on restored selections, which arrive from a shared link or the
    store without passing through apply_filter_change. Clearing any of them
    also clears yearSem and the class.
    """
    update = {}
    for attr in DATASET_FIELDS:
        value = getattr(state, attr)
        if value and value not in metadata.allowed(attr):
            log.warning("Dropping restored %s=%r: not listed in metadata.json", attr, value)
            update[attr] = ""
    if not update:
        return state
    update.update(year_sem=None, current_class_id="")
    return state.model_copy(update=update)
