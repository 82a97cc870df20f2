"""Document templates for a fresh memory bank.

A template is a title, a one-line description and a list of section
headings. The initialization line is stamped at render time.
"""

from datetime import datetime

from pydantic import BaseModel

from .models import format_timestamp

INIT_NOTE = "Memory bank initialized."
PLACEHOLDER_BULLET = "* "


class DocumentTemplate(BaseModel):
    """Initial layout of one bank document."""

    name: str
    title: str
    description: str
    sections: list[str]

    def render(self, now: datetime | None = None) -> str:
        """Render the document, stamped with ``now`` (default: current time)."""
        lines = [
            f"# {self.title}",
            "",
            self.description,
            f"{format_timestamp(now)} - {INIT_NOTE}",
        ]
        for heading in self.sections:
            lines.extend(["", f"## {heading}", "", PLACEHOLDER_BULLET])
        return "\n".join(lines) + "\n"


TEMPLATES: dict[str, DocumentTemplate] = {
    t.name: t
    for t in (
        DocumentTemplate(
            name="activeContext",
            title="Active Context",
            description=(
                "This file tracks the project's current status, including recent changes, "
                "current goals, and open questions."
            ),
            sections=["Current Focus", "Recent Changes", "Open Questions/Issues"],
        ),
        DocumentTemplate(
            name="productContext",
            title="Product Context",
            description=(
                "This file provides a high-level overview of the project and the expected "
                "product that will be created."
            ),
            sections=["Project Goal", "Key Features", "Overall Architecture"],
        ),
        DocumentTemplate(
            name="progress",
            title="Progress",
            description="This file tracks the project's progress using a task list format.",
            sections=["Completed Tasks", "Current Tasks", "Next Steps"],
        ),
        DocumentTemplate(
            name="decisionLog",
            title="Decision Log",
            description=(
                "This file records architectural and implementation decisions using a list format."
            ),
            sections=["Decision", "Rationale", "Implementation Details"],
        ),
        DocumentTemplate(
            name="systemPatterns",
            title="System Patterns",
            description="This file documents recurring patterns and standards used in the project.",
            sections=["Coding Patterns", "Architectural Patterns", "Testing Patterns"],
        ),
    )
}
