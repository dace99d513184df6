"""
Filter resolution: (filters, datasets) → what the page shows.

Pure functions over already-parsed documents. Nothing here does I/O or keeps
state; the controller passes in a FilterState and a DataSnapshot and hands the
results to the renderer.

Subject visibility is fail-closed:
    curriculum entries matching (batch, department[, year, semester])
        → union of their subject codes
        → subjects whose code is in that union
An empty union yields no subjects, never "all subjects".

Public API:
    resolve_year_sem_options(curriculum, batch, department)                → list[YearSem]
    resolve_visible_subjects(curriculum, subjects, batch, department, ys)  → list[Subject]
    resolve_notes_for_subject(notes, subject_code)                         → list[Note]
    resolve_visible_classes(classes, batch, department)                    → list[ClassRecord]
    default_class(classes)                                                 → ClassRecord | None
    group_projects_by_category(projects)                                   → dict[str, list[Project]]
    resolve_subject_views(snapshot, year_sem)                              → list[SubjectView]
"""

from collections.abc import Iterable, Sequence
from typing import NamedTuple

from resolver.models import (
    ClassRecord,
    CurriculumEntry,
    DataSnapshot,
    Note,
    Project,
    Subject,
    YearSem,
)


class SubjectView(NamedTuple):
    subject: Subject
    notes: list[Note]

    @property
    def has_notes(self) -> bool:
        return bool(self.notes)


def _matching_entries(
    curriculum: Iterable[CurriculumEntry],
    batch: str,
    department: str,
) -> list[CurriculumEntry]:
    return [c for c in curriculum if c.batch == batch and c.department == department]


def resolve_year_sem_options(
    curriculum: Sequence[CurriculumEntry],
    batch: str,
    department: str,
) -> list[YearSem]:
    """
    Year/semester terms offered for a batch + department, ascending.

    One option per matching curriculum entry; repeated (year, semester) pairs
    collapse to the first. An empty list means the curriculum has no data for
    this selection, which callers show differently from "nothing selected".
    """
    entries = _matching_entries(curriculum, batch, department)
    # sorted() is stable, so equal keys keep source order
    entries = sorted(entries, key=lambda c: (c.year, c.semester))

    options: list[YearSem] = []
    seen: set[tuple[int, int]] = set()
    for entry in entries:
        key = (entry.year, entry.semester)
        if key in seen:
            continue
        seen.add(key)
        options.append(YearSem(year=entry.year, semester=entry.semester))
    return options


def resolve_visible_subjects(
    curriculum: Sequence[CurriculumEntry],
    subjects: Sequence[Subject],
    batch: str,
    department: str,
    year_sem: YearSem | None = None,
) -> list[Subject]:
    """
    Subjects taught to a batch + department, optionally in one term.

    Output follows the order of `subjects`, not the curriculum's code order.
    """
    entries = _matching_entries(curriculum, batch, department)

    if year_sem is not None:
        entries = [
            c for c in entries
            if c.year == year_sem.year and c.semester == year_sem.semester
        ]

    codes: list[str] = []
    for entry in entries:
        codes.extend(entry.subjects)

    if not codes:
        return []

    wanted = set(codes)
    return [s for s in subjects if s.code in wanted]


def resolve_notes_for_subject(notes: Sequence[Note], subject_code: str) -> list[Note]:
    return [n for n in notes if n.subject_code == subject_code]


def resolve_visible_classes(
    classes: Sequence[ClassRecord],
    batch: str,
    department: str,
) -> list[ClassRecord]:
    return [c for c in classes if c.batch == batch and c.dept == department]


def default_class(classes: Sequence[ClassRecord]) -> ClassRecord | None:
    """The class selected when the list is first shown: the first one."""
    return classes[0] if classes else None


def group_projects_by_category(projects: Iterable[Project]) -> dict[str, list[Project]]:
    """
    Group projects by type_category.

    Groups appear in the order their category is first seen; projects keep
    source order inside each group.
    """
    grouped: dict[str, list[Project]] = {}
    for project in projects:
        grouped.setdefault(project.type_category, []).append(project)
    return grouped


def resolve_subject_views(
    snapshot: DataSnapshot,
    year_sem: YearSem | None = None,
) -> list[SubjectView]:
    """Visible subjects for the snapshot's selection, each joined with its notes."""
    visible = resolve_visible_subjects(
        snapshot.curriculum,
        snapshot.subjects,
        snapshot.batch,
        snapshot.department,
        year_sem,
    )
    return [
        SubjectView(subject, resolve_notes_for_subject(snapshot.notes, subject.code))
        for subject in visible
    ]
