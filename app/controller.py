"""
Resource browser controller: the single owner of filter state and data.

Holds the active (FilterState, DataSnapshot) pair and replaces both together
once a fetch batch has succeeded. Every fetch/parse failure is caught here and
turned into one Status for the page; a failed batch clears the snapshot so no
stale subjects or classes stay on screen.

Typical flow:
    browser = ResourceBrowser(DocumentFetcher(), FilterStore())
    browser.load_metadata()
    browser.restore(query_string)          # last-used filters
    browser.change("dept", "CSE")          # → refetch when reg/batch/dept change
    browser.select_class("CSE-A")          # → projects for that class

Project fetches carry a generation number; a response that comes back after
the selection moved on is dropped.
"""

import logging
import threading
import time
from collections.abc import Mapping
from typing import NamedTuple

from fetch.documents import DocumentFetcher
from persist.filters import FilterStore, load_filters, query_string, save_filters
from resolver.errors import MetadataLoadError, ResourceBatchError, ValidationError
from resolver.models import ClassRecord, DataSnapshot, FilterState, Metadata, Project, YearSem
from resolver.resolve import (
    SubjectView,
    default_class,
    group_projects_by_category,
    resolve_subject_views,
    resolve_visible_classes,
    resolve_year_sem_options,
)
from resolver.state import apply_filter_change, dataset_key, drop_unlisted

log = logging.getLogger(__name__)


class Status(NamedTuple):
    kind: str      # "idle" | "loading" | "ready" | "error"
    message: str


IDLE    = Status("idle", "Select a regulation, batch and department.")
LOADING = Status("loading", "Loading...")
READY   = Status("ready", "Ready")


class ResourceBrowser:
    def __init__(self, fetcher: DocumentFetcher, store: FilterStore | None = None):
        self.fetcher  = fetcher
        self.store    = store
        self.metadata: Metadata | None = None
        self.state    = FilterState()
        self.snapshot: DataSnapshot | None = None
        self.projects: list[Project] = []
        self.projects_uploaded = False
        self.status   = IDLE

        self._lock = threading.Lock()
        self._project_generation = 0
        self._status_before_reject: Status | None = None

    # ------------------------------------------------------------------
    # Metadata + restore
    # ------------------------------------------------------------------

    def load_metadata(self) -> Metadata | None:
        try:
            self.metadata = self.fetcher.fetch_metadata()
        except (MetadataLoadError, ValidationError) as exc:
            log.error("Metadata load failed: %s", exc)
            self.metadata = None
            self.status = Status("error", "Error Loading Metadata")
            return None
        log.info(
            "Metadata: %d regulations, %d batches, %d departments",
            len(self.metadata.regulations), len(self.metadata.batches),
            len(self.metadata.departments),
        )
        return self.metadata

    def restore(self, query: Mapping[str, str] | str | None = None) -> str:
        """
        Apply the persisted selection (query string first, then store).

        Restored values skip apply_filter_change, so regulation, batch and
        department are checked against metadata here before anything is
        fetched.
        """
        state = load_filters(query, self.store)
        if self.metadata is not None:
            state = drop_unlisted(state, self.metadata)
        log.info("Restored filters: %s", query_string(state) or "(none)")
        if state.is_complete:
            self.refresh(state)
        else:
            self._commit(state, None)
        return query_string(self.state)

    # ------------------------------------------------------------------
    # Filter changes
    # ------------------------------------------------------------------

    def change(self, field: str, value: str) -> str:
        """
        Apply one filter change and return the query string to show.

        Changing regulation, batch or department refetches the datasets;
        yearSem only narrows what is already loaded; a class change fetches
        that class's projects.
        """
        try:
            new_state = apply_filter_change(self.state, field, value, self.metadata)
        except ValidationError as exc:
            log.warning("Rejected filter change %s=%r: %s", field, value, exc)
            if self._status_before_reject is None:
                self._status_before_reject = self.status
            self.status = Status("error", str(exc))
            return query_string(self.state)

        if self._status_before_reject is not None:
            self.status, self._status_before_reject = self._status_before_reject, None

        if dataset_key(new_state) != dataset_key(self.state):
            if new_state.is_complete:
                self.refresh(new_state)
            else:
                self._commit(new_state, None)
        elif new_state.current_class_id != self.state.current_class_id:
            self.select_class(new_state.current_class_id)
        else:
            with self._lock:
                self.state = new_state

        return self._persist()

    def refresh(self, state: FilterState | None = None) -> bool:
        """
        Fetch the datasets for `state` and swap them in.

        Returns False (and leaves an error status) if the batch failed.
        """
        state = state or self.state
        self.status = LOADING
        t0 = time.perf_counter()

        try:
            snapshot = self.fetcher.fetch_regulation(state.regulation, state.batch, state.department)
        except ResourceBatchError as exc:
            log.error("%s", exc)
            self._commit(state, None)
            self.status = Status(
                "error", f"Error loading resources for {state.regulation}. Check file paths."
            )
            return False
        except ValidationError as exc:
            log.error("Malformed document: %s", exc)
            self._commit(state, None)
            self.status = Status("error", f"Malformed data in {exc.path}: {exc.message}")
            return False

        # a stored yearSem the new curriculum no longer offers is dropped
        if state.year_sem is not None:
            offered = resolve_year_sem_options(snapshot.curriculum, state.batch, state.department)
            if state.year_sem not in offered:
                state = state.model_copy(update={"year_sem": None})

        first = default_class(
            resolve_visible_classes(snapshot.classes, state.batch, state.department)
        )
        state = state.model_copy(update={"current_class_id": first.class_id if first else ""})

        self._commit(state, snapshot)
        self.status = READY
        log.info("Resources ready for %s  %.2fs", state.regulation, time.perf_counter() - t0)

        if first is not None:
            self.select_class(first.class_id)
        return True

    def _commit(self, state: FilterState, snapshot: DataSnapshot | None) -> None:
        with self._lock:
            self.state    = state
            self.snapshot = snapshot
            self.projects = []
            self.projects_uploaded = False
            self._project_generation += 1
        if snapshot is None and not state.is_complete:
            self.status = IDLE

    def _persist(self) -> str:
        if self.store is None:
            return query_string(self.state)
        return save_filters(self.state, self.store)

    # ------------------------------------------------------------------
    # Classes + projects
    # ------------------------------------------------------------------

    def select_class(self, class_id: str) -> bool:
        """
        Fetch projects for a class.

        Returns False when the response was discarded because another class
        was selected (or the datasets were replaced) while it was in flight.
        """
        with self._lock:
            self._project_generation += 1
            generation = self._project_generation
            self.state = apply_filter_change(self.state, "class", class_id)
            regulation = self.state.regulation

        try:
            projects = self.fetcher.fetch_projects(regulation, class_id)
        except ValidationError as exc:
            log.error("Malformed projects document: %s", exc)
            projects = []
            if generation == self._project_generation:
                self.status = Status("error", f"Malformed data in {exc.path}: {exc.message}")

        with self._lock:
            if generation != self._project_generation:
                log.debug("Discarding stale projects for %s", class_id)
                return False
            self.projects_uploaded = projects is not None
            self.projects = projects or []
        log.info("Projects for %s: %d (uploaded=%s)", class_id, len(self.projects), self.projects_uploaded)
        return True

    # ------------------------------------------------------------------
    # Views for the renderer
    # ------------------------------------------------------------------

    def year_sem_options(self) -> list[YearSem]:
        if self.snapshot is None:
            return []
        return resolve_year_sem_options(
            self.snapshot.curriculum, self.snapshot.batch, self.snapshot.department
        )

    def subject_views(self) -> list[SubjectView]:
        if self.snapshot is None:
            return []
        return resolve_subject_views(self.snapshot, self.state.year_sem)

    def visible_classes(self) -> list[ClassRecord]:
        if self.snapshot is None:
            return []
        return resolve_visible_classes(
            self.snapshot.classes, self.snapshot.batch, self.snapshot.department
        )

    def grouped_projects(self) -> dict[str, list[Project]]:
        return group_projects_by_category(self.projects)
