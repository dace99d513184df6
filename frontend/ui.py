"""
Streamlit frontend for the course resource browser.

Run with:
    streamlit run frontend/ui.py

Filters (regulation, batch, department, year/semester) live in the page's
query string and in data/filters.json, so a reload or a shared link comes back
to the same selection. Subjects, notes and projects are rendered as HTML
fragments by render/html.py.
"""

import sys
from pathlib import Path

import streamlit as st

# Ensure project root is on sys.path when run via `streamlit run frontend/ui.py`
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import FILTER_STORE, RESOURCES_ROOT, setup_logging
from app.controller import ResourceBrowser
from fetch.documents import DocumentFetcher
from persist.filters import FilterStore, state_to_params
from render.html import (
    NO_CLASSES,
    render_projects,
    render_semester_caption,
    render_status,
    render_subjects,
)

setup_logging()

st.set_page_config(page_title="Course Resources", layout="wide")
st.title("Course Resources")

WIDGET_PARAMS = {
    "reg_select":      "reg",
    "batch_select":    "batch",
    "dept_select":     "dept",
    "year_sem_select": "yearSem",
}


def _browser() -> ResourceBrowser:
    if "browser" not in st.session_state:
        browser = ResourceBrowser(DocumentFetcher(RESOURCES_ROOT), FilterStore(FILTER_STORE))
        browser.load_metadata()
        browser.restore(st.query_params.to_dict())
        st.session_state.browser = browser
    return st.session_state.browser


def _sync_widgets(browser: ResourceBrowser) -> None:
    # keyed selects read their session value, not index=, once it exists
    params = state_to_params(browser.state)
    for key, param in WIDGET_PARAMS.items():
        st.session_state[key] = params[param]
    if browser.state.current_class_id:
        st.session_state["class_select"] = browser.state.current_class_id
    else:
        st.session_state.pop("class_select", None)


def _on_change(field: str, widget_key: str) -> None:
    browser: ResourceBrowser = st.session_state.browser
    value = st.session_state[widget_key] or ""
    browser.change(field, value)
    _sync_widgets(browser)
    st.query_params.from_dict({k: v for k, v in state_to_params(browser.state).items() if v})


def _on_class_change() -> None:
    browser: ResourceBrowser = st.session_state.browser
    browser.change("class", st.session_state.class_select)


def _index(key: str, choices: list[str], current: str) -> int:
    if key in st.session_state or current not in choices:
        return 0
    return choices.index(current)


def _select(label: str, options: list[str], current: str, field: str, key: str, disabled=False):
    choices = [""] + options
    st.selectbox(
        label,
        choices,
        index=_index(key, choices, current),
        key=key,
        disabled=disabled,
        format_func=lambda v: v or f"Select {label.lower()}",
        on_change=_on_change,
        args=(field, key),
    )


browser = _browser()
state = browser.state
metadata = browser.metadata

st.markdown(render_status(browser.status), unsafe_allow_html=True)

if metadata is None:
    st.error("Error Loading Metadata. Check RESOURCES_ROOT and reload.")
    st.stop()

# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

cols = st.columns(4)
with cols[0]:
    _select("Regulation", metadata.regulations, state.regulation, "reg", "reg_select")
with cols[1]:
    _select("Batch", metadata.batches, state.batch, "batch", "batch_select",
            disabled=not state.regulation)
with cols[2]:
    _select("Department", metadata.departments, state.department, "dept", "dept_select",
            disabled=not state.regulation)
with cols[3]:
    options = browser.year_sem_options()
    if browser.snapshot is not None and not options:
        st.selectbox("Semester", ["No Data"], disabled=True, key="year_sem_empty")
    else:
        keys = [""] + [ys.key for ys in options]
        labels = {"": "All Semesters", **{ys.key: ys.label for ys in options}}
        current = state.year_sem.key if state.year_sem else ""
        st.selectbox(
            "Semester",
            keys,
            index=_index("year_sem_select", keys, current),
            key="year_sem_select",
            disabled=browser.snapshot is None,
            format_func=lambda k: labels.get(k, k),
            on_change=_on_change,
            args=("yearSem", "year_sem_select"),
        )

if not state.is_complete or browser.snapshot is None:
    if browser.status.kind == "error":
        st.error(browser.status.message)
    else:
        st.info("Pick a regulation, batch and department to see subjects, notes and projects.")
    st.stop()

# ---------------------------------------------------------------------------
# Subjects + projects
# ---------------------------------------------------------------------------

left, right = st.columns([2, 1])

with left:
    st.subheader(f"Subjects {render_semester_caption(state.year_sem)}")
    st.markdown(render_subjects(browser.subject_views()), unsafe_allow_html=True)

with right:
    st.subheader("Projects")
    classes = browser.visible_classes()
    if not classes:
        st.info(NO_CLASSES)
    else:
        if len(classes) > 1:
            ids = [c.class_id for c in classes]
            labels = {c.class_id: c.label for c in classes}
            st.selectbox(
                "Class",
                ids,
                index=_index("class_select", ids, state.current_class_id),
                key="class_select",
                format_func=lambda cid: labels.get(cid, cid),
                on_change=_on_class_change,
            )
        st.markdown(
            render_projects(browser.grouped_projects(), browser.projects_uploaded),
            unsafe_allow_html=True,
        )
