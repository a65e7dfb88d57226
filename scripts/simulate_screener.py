#!/usr/bin/env python3
"""Simulate a screener session end-to-end in process.

Walks entry -> questions -> processing -> outcome (or an off-ramp) on a real
asyncio event loop, printing every screen change, the processing status
messages as they arrive, and the recommendation tracks.  When the outcome
is reached the lead-capture form is filled in against an in-memory sink.

By default answers are **randomised** (``--random``, on by default) so each
run explores a different path through the screen graph.  Use ``--answers``
for a fixed path.

Usage::

    # Random path
    python scripts/simulate_screener.py

    # Fixed path: qualification A, supply chain A, documents B, timeline C
    python scripts/simulate_screener.py --answers A,A,B,C

    # Reproducible random path, with the rendered text screens
    python scripts/simulate_screener.py --seed 7 --render

    # Run every answer combination and print a summary table
    python scripts/simulate_screener.py --all
"""

from __future__ import annotations

import argparse
import asyncio
import itertools
import logging
import random
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure the src/ layout is importable when run from a checkout.
# ---------------------------------------------------------------------------
_REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from rich.console import Console  # noqa: E402
from rich.table import Table  # noqa: E402

from tariff_screener.controller import ScreenerController  # noqa: E402
from tariff_screener.errors import InvalidTransitionError  # noqa: E402
from tariff_screener.graph import ScreenGraph  # noqa: E402
from tariff_screener.leads import MemoryLeadSink  # noqa: E402
from tariff_screener.models.screen import Screen, ScreenKind  # noqa: E402
from tariff_screener.models.session import ScreenerView  # noqa: E402
from tariff_screener.render import ScreenRenderer  # noqa: E402
from tariff_screener.ruleset import ScreenerRuleset  # noqa: E402
from tariff_screener.sequencer import AsyncioScheduler, ProcessingSequencer  # noqa: E402

console = Console()

_DEFAULT_INTERVAL_MS = 50
_DEFAULT_EMAIL = "ops@importer.example"


# ---------------------------------------------------------------------------
# Session driver
# ---------------------------------------------------------------------------


class SessionLog:
    """Listener that records (and optionally prints) every view change."""

    def __init__(self, *, quiet: bool) -> None:
        self.path: list[Screen] = []
        self.messages: list[str] = []
        self._quiet = quiet

    def __call__(self, view: ScreenerView) -> None:
        if not self.path or self.path[-1] is not view.screen:
            self.path.append(view.screen)
            if not self._quiet:
                console.print(f"  [cyan]->[/] {view.screen.value:<24} [dim]{view.progress:>3}%[/]")
        if view.status_message and view.status_message not in self.messages:
            self.messages.append(view.status_message)
            if not self._quiet:
                console.print(f"     [dim]...[/] {view.status_message}")


def pick_codes(graph: ScreenGraph, rng: random.Random) -> list[str]:
    return [rng.choice(q.codes) for q in graph.questions]


async def run_session(
    graph: ScreenGraph,
    codes: list[str],
    *,
    interval_ms: int,
    email: str,
    renderer: ScreenRenderer | None = None,
    quiet: bool = False,
) -> dict:
    """Drive one session along ``codes`` and return a summary dict."""
    sequencer = ProcessingSequencer(AsyncioScheduler(), interval_ms=interval_ms)
    controller = ScreenerController(graph, sequencer=sequencer, strict=True)
    log = SessionLog(quiet=quiet)
    controller.subscribe(log)

    def show(view: ScreenerView) -> None:
        if renderer is not None and not quiet:
            console.print(renderer.render_view(view), markup=False, highlight=False)

    show(controller.view())
    controller.advance_manually(Screen.QUALIFICATION)

    for question, code in zip(graph.questions, codes):
        if controller.screen is not question.screen:
            break
        show(controller.view())
        try:
            controller.answer(question.key, code)
        except InvalidTransitionError as exc:
            if not quiet:
                console.print(f"  [red]![/] {exc}")
            break

    # Let the processing interstitial run to completion
    if controller.screen is Screen.PROCESSING:
        deadline = sequencer.total_ms / 1000 + 1.0
        elapsed = 0.0
        while controller.screen is Screen.PROCESSING and elapsed < deadline:
            await asyncio.sleep(interval_ms / 1000)
            elapsed += interval_ms / 1000

    final = controller.view()
    show(final)
    summary = {
        "codes": codes[: len(controller.answers)],
        "end": final.screen,
        "tracks": [t.id for t in final.recommendation_tracks],
        "messages": len(log.messages),
        "lead": None,
    }

    if final.kind is ScreenKind.OUTCOME:
        controller.advance_manually(Screen.LEAD_CAPTURE)
        sink = MemoryLeadSink()
        result = await controller.submit_lead(email, sink)
        summary["lead"] = result.ok
        if not quiet:
            status = "[green]accepted[/]" if result.ok else f"[red]rejected[/] ({result.error})"
            console.print(f"  Lead {email}: {status}")

    controller.dispose()
    return summary


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def print_summary(rows: list[dict]) -> None:
    table = Table(title="Screener paths", show_lines=False)
    table.add_column("Answers")
    table.add_column("Ends on")
    table.add_column("Tracks")
    table.add_column("Messages", justify="right")
    table.add_column("Lead")
    for row in rows:
        lead = "-" if row["lead"] is None else ("ok" if row["lead"] else "failed")
        table.add_row(
            ",".join(row["codes"]),
            row["end"].value,
            ", ".join(row["tracks"]) or "-",
            str(row["messages"]),
            lead,
        )
    console.print(table)


async def main_async(args: argparse.Namespace) -> int:
    ruleset = ScreenerRuleset(args.ruleset).load()
    graph = ScreenGraph(ruleset)
    renderer = ScreenRenderer(ruleset) if args.render else None

    if args.all:
        rows = []
        for combo in itertools.product(*(q.codes for q in graph.questions)):
            rows.append(await run_session(
                graph, list(combo), interval_ms=1, email=args.email, quiet=True,
            ))
        # Collapse combinations that stopped at the same off-ramp
        unique = {(tuple(r["codes"]), r["end"]): r for r in rows}
        print_summary(list(unique.values()))
        return 0

    if args.answers:
        codes = [c.strip().upper() for c in args.answers.split(",") if c.strip()]
    else:
        rng = random.Random(args.seed) if args.random else random.Random(0)
        codes = pick_codes(graph, rng)

    console.rule(f"[bold]Screener simulation ({','.join(codes)})")
    summary = await run_session(
        graph, codes,
        interval_ms=args.interval_ms,
        email=args.email,
        renderer=renderer,
        quiet=args.quiet,
    )
    if not args.quiet:
        print_summary([summary])
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Simulate a tariff screener session end-to-end.",
    )
    parser.add_argument(
        "--answers",
        help="Comma-separated option codes in question order, e.g. A,A,B,C",
    )
    parser.add_argument(
        "--random",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Randomise answers when --answers is not given (default: on).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for random answers")
    parser.add_argument(
        "--all",
        action="store_true",
        help="Run every answer combination and print one summary table",
    )
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=_DEFAULT_INTERVAL_MS,
        help=f"Processing stage interval (default: {_DEFAULT_INTERVAL_MS})",
    )
    parser.add_argument("--email", default=_DEFAULT_EMAIL, help="Email used for lead capture")
    parser.add_argument("--ruleset", default=None, help="Path to an alternative ruleset YAML")
    parser.add_argument("--render", action="store_true", help="Print the rendered text screens")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    sys.exit(asyncio.run(main_async(args)))


if __name__ == "__main__":
    main()
