from app.controller import Status
from render.html import (
    NO_NOTES,
    NO_SUBJECTS,
    NO_PROJECTS,
    NO_SYLLABUS,
    NO_UPLOADS,
    render_projects,
    render_semester_caption,
    render_status,
    render_subjects,
)
from resolver.models import Note, Project, Subject, YearSem
from resolver.resolve import SubjectView, group_projects_by_category


class TestSubjectCards:
    """Test subject card markup."""

    def test_no_subjects(self):
        """Test an empty selection renders the empty message."""
        assert NO_SUBJECTS in render_subjects([])

    def test_no_notes_marker(self):
        """Test a subject without notes shows the no-notes marker."""
        html = render_subjects([SubjectView(Subject(code="CS102", name="DS"), [])])
        assert NO_NOTES in html
        assert NO_SYLLABUS in html

    def test_syllabus_and_notes(self):
        """Test units, topics, sub-topics and note links are rendered."""
        subject = Subject.model_validate({
            "code": "CS101",
            "name": "C",
            "syllabus": {"units": [{"name": "Unit 1", "topics": [
                {"topic": "Pointers", "subTopics": ["Arithmetic", "Arrays"]}]}]},
        })
        note = Note(subject_code="CS101", resource_type="Slides", author_name="Asha",
                    author_link="https://example.org/asha",
                    links=[{"name": "Deck", "link": "https://example.org/deck"}])
        html = render_subjects([SubjectView(subject, [note])])

        assert "Unit 1" in html
        assert "Arithmetic, Arrays" in html
        assert 'href="https://example.org/deck"' in html
        assert NO_NOTES not in html

    def test_escapes_text(self):
        """Test names from the JSON cannot inject markup."""
        html = render_subjects([SubjectView(Subject(code="X1", name="<script>x</script>"), [])])
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestFilterMarkup:
    """Test captions and the status badge."""

    def test_caption(self):
        """Test the semester caption text."""
        assert render_semester_caption(None) == "(All Semesters)"
        assert render_semester_caption(YearSem(year=2, semester=1)) == "(Year 2 - Sem 1)"

    def test_status(self):
        """Test the status badge carries its kind."""
        html = render_status(Status("error", "Error"))
        assert 'status-error' in html


class TestProjectMarkup:
    """Test grouped project markup."""

    def test_not_uploaded(self):
        """Test a class with no projects document shows the no-uploads message."""
        html = render_projects({}, uploaded=False)
        assert NO_UPLOADS in html
        assert NO_PROJECTS not in html

    def test_uploaded_but_empty(self):
        """Test an empty projects document shows the no-projects message."""
        html = render_projects({})
        assert NO_PROJECTS in html
        assert NO_UPLOADS not in html

    def test_groups_in_order(self, sample_projects):
        """Test categories render in first-seen order."""
        html = render_projects(group_projects_by_category(sample_projects))
        assert html.index("Mini Project") < html.index("Major Project")
        assert "T1: Library App" in html
        assert "Asha" in html and "(22CS001)" in html

    def test_link_numbering(self):
        """Test links are numbered only when there is more than one."""
        one = Project(type_category="A", team_no="1", title="x",
                      presentation_links=["https://p"], documents=["https://d1", "https://d2"])
        html = render_projects(group_projects_by_category([one]))

        assert ">Presentation<" in html
        assert ">Report 1<" in html
        assert ">Report 2<" in html
