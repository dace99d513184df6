import pytest

from resolver.models import (
    ClassRecord,
    CurriculumEntry,
    DataSnapshot,
    Note,
    Project,
    Subject,
)


@pytest.fixture
def sample_curriculum():
    """Curriculum for two batches of R22; CSE 2022 has two terms."""
    return [
        CurriculumEntry(batch="2022", department="CSE", year=1, semester=2, subjects=["CS102", "MA101"]),
        CurriculumEntry(batch="2022", department="CSE", year=1, semester=1, subjects=["CS101"]),
        CurriculumEntry(batch="2022", department="ECE", year=1, semester=1, subjects=["EC101"]),
        CurriculumEntry(batch="2023", department="CSE", year=1, semester=1, subjects=["CS101", "CS103"]),
    ]


@pytest.fixture
def sample_subjects():
    return [
        Subject(code="MA101", name="Calculus"),
        Subject(code="CS101", name="Programming in C"),
        Subject(code="CS102", name="Data Structures"),
        Subject(code="CS103", name="Digital Logic"),
        Subject(code="EC101", name="Circuits"),
    ]


@pytest.fixture
def sample_notes():
    return [
        Note(subject_code="CS101", resource_type="Handwritten Notes",
             author_name="Asha", author_link="https://example.org/asha",
             links=[{"name": "Unit 1", "link": "https://example.org/cs101-u1"}]),
        Note(subject_code="MA101", resource_type="Slides",
             author_name="Ravi", author_link="https://example.org/ravi", links=[]),
        Note(subject_code="CS101", resource_type="Question Bank",
             author_name="Meena", author_link="https://example.org/meena", links=[]),
    ]


@pytest.fixture
def sample_classes():
    return [
        ClassRecord(class_id="CSE-A", name="CSE Section A", batch="2022", dept="CSE"),
        ClassRecord(class_id="ECE-A", name="ECE Section A", batch="2022", dept="ECE"),
        ClassRecord(class_id="CSE-B", name="", batch="2022", dept="CSE"),
        ClassRecord(class_id="CSE-2023", name="CSE 2023", batch="2023", dept="CSE"),
    ]


@pytest.fixture
def sample_projects():
    return [
        Project(type_category="Mini Project", team_no="T1", title="Library App",
                members=[{"name": "Asha", "roll": "22CS001"}]),
        Project(type_category="Major Project", team_no="T2", title="Traffic Vision"),
        Project(type_category="Mini Project", team_no="T3", title="Chat Bot"),
    ]


@pytest.fixture
def sample_snapshot(sample_curriculum, sample_subjects, sample_notes, sample_classes):
    return DataSnapshot(
        regulation="R22",
        batch="2022",
        department="CSE",
        subjects=sample_subjects,
        notes=sample_notes,
        classes=sample_classes,
        curriculum=sample_curriculum,
    )
