import json

import pytest
import requests

from fetch.documents import DocumentFetcher
from resolver.errors import MetadataLoadError, ResourceBatchError, ValidationError

BASE = "https://resources.example.org"

SUBJECTS = [{"code": "CS101", "name": "Programming in C"}]
NOTES = [{"subject_code": "CS101", "resource_type": "Notes", "author_name": "A",
          "author_link": "https://example.org/a", "links": []}]
CLASSES = [{"class_id": "CSE-A", "name": "CSE A", "batch": "2022", "dept": "CSE"}]
CURRICULUM = [{"batch": "2022", "department": "CSE", "year": 1, "semester": 1, "subjects": ["CS101"]}]


class FakeResponse:
    def __init__(self, status_code: int, body=None):
        self.status_code = status_code
        self.text = body if isinstance(body, str) else json.dumps(body)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Serves canned documents by path; anything unknown is a 404."""

    def __init__(self, documents: dict):
        self.documents = documents
        self.requested: list[str] = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        path = url[len(BASE) + 1:]
        entry = self.documents.get(path)
        if entry is None:
            return FakeResponse(404, "")
        if isinstance(entry, FakeResponse):
            return entry
        if isinstance(entry, Exception):
            raise entry
        return FakeResponse(200, entry)


@pytest.fixture
def documents():
    return {
        "metadata.json": {"regulations": ["R22"], "batches": ["2022"], "departments": ["CSE"]},
        "R22/subjects.json": SUBJECTS,
        "R22/notes.json": NOTES,
        "R22/classes.json": CLASSES,
        "R22/curriculum.json": CURRICULUM,
        "R22/CSE-A/projects.json": [{"type_category": "Mini", "team_no": "1", "title": "App"}],
    }


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("fetch.documents.time.sleep", lambda _: None)


def _fetcher(documents, retries=1):
    return DocumentFetcher(BASE, session=FakeSession(documents), retries=retries)


class TestRegulationBatch:
    """Test the four-document regulation fetch."""

    def test_builds_snapshot(self, documents):
        """Test all four documents land in one snapshot."""
        snapshot = _fetcher(documents).fetch_regulation("R22", "2022", "CSE")

        assert snapshot.regulation == "R22"
        assert [s.code for s in snapshot.subjects] == ["CS101"]
        assert len(snapshot.notes) == 1
        assert snapshot.classes[0].class_id == "CSE-A"
        assert snapshot.curriculum[0].subjects == ["CS101"]

    def test_requests_conventional_paths(self, documents):
        """Test the fetcher asks for {reg}/<name>.json."""
        fetcher = _fetcher(documents)
        fetcher.fetch_regulation("R22", "2022", "CSE")

        assert sorted(fetcher.session.requested) == sorted(
            f"{BASE}/R22/{name}.json" for name in ("subjects", "notes", "classes", "curriculum")
        )

    def test_missing_curriculum_is_empty(self, documents):
        """Test a missing curriculum document is treated as []."""
        del documents["R22/curriculum.json"]
        snapshot = _fetcher(documents).fetch_regulation("R22", "2022", "CSE")
        assert snapshot.curriculum == []

    @pytest.mark.parametrize("name", ["subjects", "notes", "classes"])
    def test_missing_required_document_fails_batch(self, documents, name):
        """Test a missing subjects/notes/classes document fails the whole batch."""
        del documents[f"R22/{name}.json"]
        with pytest.raises(ResourceBatchError) as excinfo:
            _fetcher(documents).fetch_regulation("R22", "2022", "CSE")

        assert excinfo.value.missing == [f"{name}.json"]
        assert excinfo.value.regulation == "R22"

    def test_server_error_fails_batch_after_retries(self, documents):
        """Test a persistent 500 is retried, then counted as missing."""
        documents["R22/notes.json"] = FakeResponse(500, "")
        fetcher = _fetcher(documents, retries=3)

        with pytest.raises(ResourceBatchError):
            fetcher.fetch_regulation("R22", "2022", "CSE")
        assert fetcher.session.requested.count(f"{BASE}/R22/notes.json") == 3

    def test_connection_error_fails_batch(self, documents):
        """Test network errors count as a missing document."""
        documents["R22/classes.json"] = requests.ConnectionError("down")
        with pytest.raises(ResourceBatchError):
            _fetcher(documents).fetch_regulation("R22", "2022", "CSE")

    def test_malformed_document_is_validation_error(self, documents):
        """Test a shape error is reported distinctly from unavailability."""
        documents["R22/subjects.json"] = [{"name": "No code"}]
        with pytest.raises(ValidationError) as excinfo:
            _fetcher(documents).fetch_regulation("R22", "2022", "CSE")
        assert excinfo.value.path == "R22/subjects.json[0].code"

    def test_invalid_json_is_validation_error(self, documents):
        """Test a body that is not JSON is a validation error."""
        documents["R22/notes.json"] = FakeResponse(200, "<html>oops</html>")
        with pytest.raises(ValidationError):
            _fetcher(documents).fetch_regulation("R22", "2022", "CSE")


class TestMetadataAndProjects:
    """Test metadata and per-class project documents."""

    def test_metadata(self, documents):
        """Test metadata.json is parsed."""
        meta = _fetcher(documents).fetch_metadata()
        assert meta.regulations == ["R22"]

    def test_missing_metadata(self, documents):
        """Test a missing metadata.json raises MetadataLoadError."""
        del documents["metadata.json"]
        with pytest.raises(MetadataLoadError):
            _fetcher(documents).fetch_metadata()

    def test_projects(self, documents):
        """Test projects are fetched from {reg}/{class_id}/projects.json."""
        projects = _fetcher(documents).fetch_projects("R22", "CSE-A")
        assert [p.title for p in projects] == ["App"]

    def test_missing_projects_is_none(self, documents):
        """Test a class without a projects document gives None, not an error."""
        assert _fetcher(documents).fetch_projects("R22", "CSE-B") is None

    def test_empty_projects_document(self, documents):
        """Test an uploaded but empty projects document gives []."""
        documents["R22/CSE-B/projects.json"] = []
        assert _fetcher(documents).fetch_projects("R22", "CSE-B") == []


class TestLocalDirectory:
    """Test reading the resource tree straight from disk."""

    def test_reads_files(self, tmp_path):
        """Test a local directory root works like a URL root."""
        reg = tmp_path / "R22"
        reg.mkdir()
        (reg / "subjects.json").write_text(json.dumps(SUBJECTS), encoding="utf-8")
        (reg / "notes.json").write_text(json.dumps(NOTES), encoding="utf-8")
        (reg / "classes.json").write_text(json.dumps(CLASSES), encoding="utf-8")

        snapshot = DocumentFetcher(str(tmp_path)).fetch_regulation("R22", "2022", "CSE")

        assert [s.code for s in snapshot.subjects] == ["CS101"]
        assert snapshot.curriculum == []

    def test_missing_directory_fails_batch(self, tmp_path):
        """Test an unknown regulation directory fails the batch."""
        with pytest.raises(ResourceBatchError) as excinfo:
            DocumentFetcher(str(tmp_path)).fetch_regulation("R99", "2022", "CSE")
        assert excinfo.value.missing == ["subjects.json", "notes.json", "classes.json"]

    def test_undecodable_file_is_validation_error(self, tmp_path):
        """Test a document that is not UTF-8 is reported as malformed with its path."""
        reg = tmp_path / "R22"
        reg.mkdir()
        (reg / "subjects.json").write_bytes(b'[{"code": "\xff\xfe", "name": "x"}]')
        (reg / "notes.json").write_text(json.dumps(NOTES), encoding="utf-8")
        (reg / "classes.json").write_text(json.dumps(CLASSES), encoding="utf-8")

        with pytest.raises(ValidationError) as excinfo:
            DocumentFetcher(str(tmp_path)).fetch_regulation("R22", "2022", "CSE")
        assert excinfo.value.path == "R22/subjects.json"

    def test_unreadable_path_counts_as_missing(self, tmp_path):
        """Test a document path that cannot be read (a directory) is a miss."""
        reg = tmp_path / "R22"
        reg.mkdir()
        (reg / "subjects.json").write_text(json.dumps(SUBJECTS), encoding="utf-8")
        (reg / "notes.json").mkdir()
        (reg / "classes.json").write_text(json.dumps(CLASSES), encoding="utf-8")

        with pytest.raises(ResourceBatchError) as excinfo:
            DocumentFetcher(str(tmp_path)).fetch_regulation("R22", "2022", "CSE")
        assert excinfo.value.missing == ["notes.json"]
