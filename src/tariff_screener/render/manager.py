"""ScreenRenderer — Jinja2-based plain-text rendering of screener views.

Templates live in the ``template/`` directory and are selected by the
screen's kind, never by a chain of per-screen conditionals.  Each template
receives the view plus the ruleset content it needs (off-ramp copy for
terminal screens, outcome content for the dashboard).

The output is a terminal-friendly text block: the simulation script prints
it and the REST API serves it from ``/sessions/{id}/render``.
"""

from __future__ import annotations

from pathlib import Path

import jinja2

from tariff_screener.models.screen import ScreenKind
from tariff_screener.models.session import ScreenerView
from tariff_screener.ruleset import ScreenerRuleset

# --- ScreenKind-to-template mapping ---
_KIND_TEMPLATES: dict[ScreenKind, str] = {
    ScreenKind.ENTRY: "entry.jinja2",
    ScreenKind.QUESTION: "question.jinja2",
    ScreenKind.PROCESSING: "processing.jinja2",
    ScreenKind.OUTCOME: "outcome.jinja2",
    ScreenKind.LEAD_CAPTURE: "lead_capture.jinja2",
    ScreenKind.TERMINAL: "terminal.jinja2",
}

PROGRESS_BAR_WIDTH = 20


def progress_bar(progress: int, width: int = PROGRESS_BAR_WIDTH) -> str:
    """Render ``[#####.....] 50%``; empty string at 0 like the web UI."""
    if progress <= 0:
        return ""
    filled = round(width * min(progress, 100) / 100)
    return f"[{'#' * filled}{'.' * (width - filled)}] {progress}%"


class ScreenRenderer:
    """Renders a :class:`ScreenerView` to text.

    Args:
        ruleset: loaded ruleset, used for outcome and off-ramp content
        template_dir: optional override for the template directory.
            Defaults to ``template/`` sibling of this module.
    """

    def __init__(self, ruleset: ScreenerRuleset, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent / "template"
        self._ruleset = ruleset
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["progress_bar"] = progress_bar

    def template_for(self, kind: ScreenKind) -> str:
        return _KIND_TEMPLATES[kind]

    def render_view(self, view: ScreenerView) -> str:
        """Render the screen described by ``view`` with header and disclaimer."""
        context: dict = {"view": view}
        if view.kind is ScreenKind.TERMINAL:
            context["off_ramp"] = self._ruleset.get_off_ramp(view.screen)
        elif view.kind is ScreenKind.OUTCOME:
            context["outcome"] = self._ruleset.outcome
        return self.render(self.template_for(view.kind), **context)

    def render(self, template_name: str, **context) -> str:
        """Render a named template with arbitrary context."""
        template = self._env.get_template(template_name)
        return template.render(**context)
