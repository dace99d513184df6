"""
Document fetcher for the pre-generated resource tree.

Layout under RESOURCES_ROOT (a base URL or a local directory):
    metadata.json                 regulations / batches / departments
    {reg}/subjects.json           required
    {reg}/notes.json              required
    {reg}/classes.json            required
    {reg}/curriculum.json         optional, missing means []
    {reg}/{class_id}/projects.json  optional, missing means "not uploaded"

The four regulation documents are fetched concurrently and only turned into a
DataSnapshot once all four have come back. A miss on subjects, notes or
classes fails the whole batch.

Public API:
    DocumentFetcher(root, session, timeout, retries)
    DocumentFetcher.fetch_metadata()                      → Metadata
    DocumentFetcher.fetch_regulation(reg, batch, dept)    → DataSnapshot
    DocumentFetcher.fetch_projects(reg, class_id)         → list[Project] | None
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Optional

import requests

from app.config import REQUEST_RETRIES, REQUEST_TIMEOUT, RESOURCES_ROOT, USER_AGENT
from resolver.errors import MetadataLoadError, ResourceBatchError, ValidationError
from resolver.models import (
    ClassRecord,
    CurriculumEntry,
    DataSnapshot,
    Metadata,
    Note,
    Project,
    Subject,
    parse_document,
    parse_documents,
)

log = logging.getLogger(__name__)

METADATA_DOC = "metadata.json"
REGULATION_DOCS = ("subjects", "notes", "classes", "curriculum")
REQUIRED_DOCS = ("subjects", "notes", "classes")

_MISSING = object()


def _is_url(root: str) -> bool:
    return root.startswith(("http://", "https://"))


class DocumentFetcher:
    def __init__(
        self,
        root: str = RESOURCES_ROOT,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
        retries: int = REQUEST_RETRIES,
    ):
        self.root    = root.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self.session = session

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------

    def _get(self, url: str) -> Optional[requests.Response]:
        """GET a URL with exponential-backoff retries; None if it never succeeds."""
        for attempt in range(self.retries):
            try:
                resp = self.session.get(url, timeout=self.timeout)
                if resp.status_code == 404:
                    log.info("Not found: %s", url)
                    return None
                resp.raise_for_status()
                return resp
            except requests.RequestException as exc:
                log.warning("Request failed (attempt %d/%d) %s: %s", attempt + 1, self.retries, url, exc)
                if attempt < self.retries - 1:
                    time.sleep(2 ** attempt)
        return None

    def _read_text(self, relpath: str) -> Optional[str]:
        if _is_url(self.root):
            resp = self._get(f"{self.root}/{relpath}")
            return resp.text if resp is not None else None

        path = Path(self.root) / relpath
        if not path.exists():
            log.info("Not found: %s", path)
            return None
        try:
            raw = path.read_bytes()
        except OSError as exc:
            log.warning("Could not read %s: %s", path, exc)
            return None
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValidationError(relpath, f"not valid UTF-8: {exc}") from exc

    def get_json(self, relpath: str) -> Any:
        """
        Load one document; return _MISSING on a non-success response.

        A body that is not JSON is a data-authoring bug, not a miss, and
        raises ValidationError.
        """
        text = self._read_text(relpath)
        if text is None:
            return _MISSING
        try:
            return json.loads(text)
        except ValueError as exc:
            raise ValidationError(relpath, f"invalid JSON: {exc}") from exc

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def fetch_metadata(self) -> Metadata:
        payload = self.get_json(METADATA_DOC)
        if payload is _MISSING:
            raise MetadataLoadError(f"{METADATA_DOC} not found under {self.root}")
        return parse_document(Metadata, payload, METADATA_DOC)

    def fetch_regulation(self, regulation: str, batch: str, department: str) -> DataSnapshot:
        """
        Fetch the four documents for a regulation and build a snapshot.

        Raises ResourceBatchError if subjects, notes or classes are missing,
        ValidationError if any document is malformed.
        """
        log.info("Fetching resources: reg=%r  batch=%r  dept=%r", regulation, batch, department)
        t0 = time.perf_counter()

        with ThreadPoolExecutor(max_workers=len(REGULATION_DOCS)) as pool:
            futures = {
                name: pool.submit(self.get_json, f"{regulation}/{name}.json")
                for name in REGULATION_DOCS
            }
            # wait for every fetch before looking at any of them
            payloads = {name: future.result() for name, future in futures.items()}

        missing = [name for name in REQUIRED_DOCS if payloads[name] is _MISSING]
        if missing:
            raise ResourceBatchError(regulation, [f"{name}.json" for name in missing])

        curriculum_payload = payloads["curriculum"]
        if curriculum_payload is _MISSING:
            log.warning("Curriculum file not found for %s; treating as empty.", regulation)
            curriculum_payload = []

        snapshot = DataSnapshot(
            regulation=regulation,
            batch=batch,
            department=department,
            subjects=parse_documents(Subject, payloads["subjects"], f"{regulation}/subjects.json"),
            notes=parse_documents(Note, payloads["notes"], f"{regulation}/notes.json"),
            classes=parse_documents(ClassRecord, payloads["classes"], f"{regulation}/classes.json"),
            curriculum=parse_documents(
                CurriculumEntry, curriculum_payload, f"{regulation}/curriculum.json"
            ),
        )

        log.info(
            "  %d subjects, %d notes, %d classes, %d curriculum entries  %.2fs",
            len(snapshot.subjects), len(snapshot.notes), len(snapshot.classes),
            len(snapshot.curriculum), time.perf_counter() - t0,
        )
        return snapshot

    def fetch_projects(self, regulation: str, class_id: str) -> Optional[list[Project]]:
        """Projects uploaded for one class; None when nothing has been uploaded."""
        relpath = f"{regulation}/{class_id}/projects.json"
        payload = self.get_json(relpath)
        if payload is _MISSING:
            log.info("No projects uploaded for %s/%s.", regulation, class_id)
            return None
        return parse_documents(Project, payload, relpath)
