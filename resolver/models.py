"""
Document shapes and filter state.

Every JSON document served under the resources root is parsed into one of
the frozen pydantic models below. Year and semester are plain ints: pydantic's
lax mode turns "1" into 1 on load, and parse_year_sem does the same for the
"Y-S" filter string, so nothing downstream compares str against int.

Public API:
    parse_documents(model, payload, document) → list[model]
    parse_document(model, payload, document)  → model
    parse_year_sem(text)                      → YearSem | None
"""

from typing import Any, NoReturn, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from resolver.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ---------------------------------------------------------------------------
# Curriculum + subjects
# ---------------------------------------------------------------------------

class CurriculumEntry(_Frozen):
    batch: str
    department: str
    year: int
    semester: int
    subjects: list[str] = []


class Topic(_Frozen):
    topic: str
    sub_topics: list[str] = Field(default=[], alias="subTopics")


class Unit(_Frozen):
    name: str
    topics: list[Topic] = []


class Syllabus(_Frozen):
    units: list[Unit] = []


class Subject(_Frozen):
    code: str
    name: str
    syllabus: Syllabus | None = None


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

class NoteLink(_Frozen):
    name: str
    link: str


class Note(_Frozen):
    subject_code: str
    resource_type: str
    author_name: str
    author_link: str
    links: list[NoteLink] = []


# ---------------------------------------------------------------------------
# Classes + projects
# ---------------------------------------------------------------------------

class ClassRecord(_Frozen):
    class_id: str
    name: str = ""
    batch: str
    dept: str

    @property
    def label(self) -> str:
        return self.name or self.class_id


class Member(_Frozen):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str
    roll: str


class Project(_Frozen):
    # team numbers and rolls are often typed as bare numbers in the JSON
    model_config = ConfigDict(coerce_numbers_to_str=True)

    type_category: str
    team_no: str
    title: str
    members: list[Member] = []
    presentation_links: list[str] = []
    documents: list[str] = []


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

class Metadata(_Frozen):
    regulations: list[str] = []
    batches: list[str] = []
    departments: list[str] = []

    def allowed(self, field: str) -> list[str]:
        """Valid values for a filter key ("regulation", "batch", "department")."""
        return {
            "regulation": self.regulations,
            "batch":      self.batches,
            "department": self.departments,
        }.get(field, [])


# ---------------------------------------------------------------------------
# Filter state + snapshot
# ---------------------------------------------------------------------------

class YearSem(_Frozen):
    year: int
    semester: int

    @property
    def key(self) -> str:
        """Wire form used in the query string and the filter store."""
        return f"{self.year}-{self.semester}"

    @property
    def label(self) -> str:
        return f"Year {self.year} - Sem {self.semester}"


class FilterState(_Frozen):
    regulation: str = ""
    batch: str = ""
    department: str = ""
    year_sem: YearSem | None = None
    current_class_id: str = ""

    @property
    def is_complete(self) -> bool:
        """True once regulation, batch and department are all chosen."""
        return bool(self.regulation and self.batch and self.department)


class DataSnapshot(_Frozen):
    """Everything fetched for one (regulation, batch, department) selection."""

    regulation: str
    batch: str
    department: str
    subjects: list[Subject] = []
    notes: list[Note] = []
    classes: list[ClassRecord] = []
    curriculum: list[CurriculumEntry] = []


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _format_loc(document: str, loc: tuple[Any, ...]) -> str:
    path = document
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}"
    return path


def _raise_validation(document: str, exc: pydantic.ValidationError) -> NoReturn:
    first = exc.errors()[0]
    raise ValidationError(_format_loc(document, first["loc"]), first["msg"]) from exc


def parse_documents(model: type[M], payload: Any, document: str) -> list[M]:
    """
    Validate a JSON array against `model`.

    Raises ValidationError naming the first bad field, e.g.
    "notes.json[4].subject_code: Field required".
    """
    try:
        return TypeAdapter(list[model]).validate_python(payload)
    except pydantic.ValidationError as exc:
        _raise_validation(document, exc)


def parse_document(model: type[M], payload: Any, document: str) -> M:
    """Validate a single JSON object against `model`."""
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        _raise_validation(document, exc)


def parse_year_sem(text: str | None) -> YearSem | None:
    """
    Parse the "Y-S" filter string ("2-1" → YearSem(year=2, semester=1)).

    Empty or missing means "all semesters" and returns None.
    """
    if not text:
        return None
    year, sep, semester = text.strip().partition("-")
    if not sep:
        raise ValidationError("yearSem", f"expected 'year-semester', got {text!r}")
    try:
        return YearSem(year=int(year), semester=int(semester))
    except ValueError as exc:
        raise ValidationError("yearSem", f"expected integers, got {text!r}") from exc
