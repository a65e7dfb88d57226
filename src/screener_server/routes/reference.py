"""Reference data endpoints — screens, questions, and the transition graph.

These are read-only endpoints that expose the loaded ruleset so a
presentation layer (or an inspection tool) can build its UI from data.
"""

from fastapi import APIRouter, Depends

from tariff_screener.graph import ScreenGraph
from tariff_screener.models.question import Question
from tariff_screener.models.screen import Screen
from tariff_screener.progress import progress_for

from screener_server.dependencies import get_graph

router = APIRouter(prefix="/reference", tags=["reference"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/screens")
def list_screens() -> list[dict]:
    """Return every screen with its kind and progress value."""
    return [
        {
            "id": screen.value,
            "kind": screen.kind.value,
            "progress": progress_for(screen),
        }
        for screen in Screen
    ]


@router.get("/questions")
def list_questions(
    graph: ScreenGraph = Depends(get_graph),
) -> list[Question]:
    """Return all questions in the order they are asked."""
    return graph.questions


@router.get("/questions/{key}")
def get_question(
    key: str,
    graph: ScreenGraph = Depends(get_graph),
) -> Question:
    """Return one question by key (404 if unknown)."""
    return graph.ruleset.get_question(key)


@router.get("/graph")
def get_graph_edges(
    graph: ScreenGraph = Depends(get_graph),
) -> list[dict]:
    """Return the transition edges as ``[{source, target, label, kind}]``."""
    return graph.edges()
