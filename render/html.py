"""
HTML fragments for the resource page.

Takes resolver output and returns markup strings. All text and URLs pass
through html.escape; nothing here filters or joins data.

Public API:
    render_semester_caption(year_sem)          → str
    render_subjects(views)                     → str
    render_projects(grouped, uploaded)         → str
    render_status(status)                      → str
"""

from html import escape

from resolver.models import Note, Project, Syllabus, YearSem
from resolver.resolve import SubjectView

NO_SUBJECTS  = "No subjects found for this selection."
NO_NOTES     = "No notes available yet."
NO_SYLLABUS  = "Syllabus data not available."
NO_CLASSES   = "No classes found."
NO_UPLOADS   = "No projects uploaded."
NO_PROJECTS  = "No projects found."
ALL_SEMESTERS = "All Semesters"


def _empty(message: str) -> str:
    return f'<div class="empty">{escape(message)}</div>'


def _link(href: str, text: str, css: str = "") -> str:
    cls = f' class="{css}"' if css else ""
    return f'<a href="{escape(href)}" target="_blank" rel="noopener"{cls}>{escape(text)}</a>'


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def render_semester_caption(year_sem: YearSem | None) -> str:
    return f"({year_sem.label})" if year_sem else f"({ALL_SEMESTERS})"


# ---------------------------------------------------------------------------
# Subjects
# ---------------------------------------------------------------------------

def _render_syllabus(syllabus: Syllabus | None) -> str:
    if syllabus is None or not syllabus.units:
        return _empty(NO_SYLLABUS)

    units = []
    for unit in syllabus.units:
        topics = []
        for t in unit.topics:
            sub = ""
            if t.sub_topics:
                sub = f'<span class="subtopics">{escape(", ".join(t.sub_topics))}</span>'
            topics.append(f'<li><span class="topic">{escape(t.topic)}</span>{sub}</li>')
        units.append(
            f'<details class="unit"><summary>{escape(unit.name)}</summary>'
            f'<ul>{"".join(topics)}</ul></details>'
        )
    return "".join(units)


def _render_note(note: Note) -> str:
    links = "".join(_link(l.link, l.name, "note-link") for l in note.links)
    return (
        '<div class="note">'
        f'<div class="note-type">{escape(note.resource_type)}</div>'
        f'<div class="note-author">By {_link(note.author_link, note.author_name)}</div>'
        f'<div class="note-links">{links}</div>'
        "</div>"
    )


def render_subject_card(view: SubjectView) -> str:
    sub = view.subject
    notes = "".join(_render_note(n) for n in view.notes) if view.has_notes else _empty(NO_NOTES)
    return (
        '<div class="subject-card">'
        f'<div class="subject-head"><h3>{escape(sub.name)}</h3>'
        f'<span class="subject-code">{escape(sub.code)}</span></div>'
        f'<h4>Study Resources</h4><div class="notes">{notes}</div>'
        f"<h4>Curriculum</h4>{_render_syllabus(sub.syllabus)}"
        "</div>"
    )


def render_subjects(views: list[SubjectView]) -> str:
    if not views:
        return _empty(NO_SUBJECTS)
    return "".join(render_subject_card(v) for v in views)


# ---------------------------------------------------------------------------
# Classes + projects
# ---------------------------------------------------------------------------

def _numbered(links: list[str], label: str, css: str) -> list[str]:
    # only number the links when there is more than one
    out = []
    for idx, href in enumerate(links, start=1):
        text = f"{label} {idx}" if len(links) > 1 else label
        out.append(_link(href, text, css))
    return out


def render_project(project: Project) -> str:
    members = ", ".join(
        f'{escape(m.name)} <span class="roll">({escape(m.roll)})</span>' for m in project.members
    )
    links = _numbered(project.presentation_links, "Presentation", "presentation")
    links += _numbered(project.documents, "Report", "report")
    return (
        '<div class="project">'
        f'<div class="project-title">{escape(project.team_no)}: {escape(project.title)}</div>'
        f'<div class="members">{members}</div>'
        f'<div class="project-links">{"".join(links)}</div>'
        "</div>"
    )


def render_projects(grouped: dict[str, list[Project]], uploaded: bool = True) -> str:
    """
    One open <details> block per category, in the order given.

    `uploaded` is False when the class has no projects document at all, which
    reads differently from a document that lists nothing.
    """
    if not uploaded:
        return _empty(NO_UPLOADS)
    if not grouped:
        return _empty(NO_PROJECTS)

    blocks = []
    for category, projects in grouped.items():
        items = "".join(render_project(p) for p in projects)
        blocks.append(
            f'<details class="project-group" open><summary>{escape(category)}</summary>'
            f"<div>{items}</div></details>"
        )
    return "".join(blocks)


def render_status(status) -> str:
    return f'<span class="status status-{escape(status.kind)}">{escape(status.message)}</span>'
