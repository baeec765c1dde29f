from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.kv_directory import JsonDirectoryStore
from ..adapters.progress_store import KeyedProgressStore
from ..application.session import PlaybackSession
from ..application.use_cases import record_span, resume_position
from ..config import Settings, load_settings, parse_touch
from ..domain.coverage import (
    calculate_progress_percentage, coverage_segments, format_timestamp, unwatched_ranges,
)
from ..domain.errors import WatchspanError
from ..domain.models import Interval, ProgressRecord
from ..domain.value_types import TimelineId

app = typer.Typer(help="watchspan: track which parts of a timeline were actually watched.")
console = Console()
err_console = Console(stderr=True)

BAR_WIDTH = 50


@dataclass(slots=True)
class _State:
    settings: Settings
    store: KeyedProgressStore


def _fail(msg: str) -> typer.Exit:
    err_console.print(f"[bold red]error[/]: {escape(msg)}")
    return typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    store_dir: Optional[str] = typer.Option(None, help="Directory holding stored progress records"),
    namespace: Optional[str] = typer.Option(None, help="Key prefix for stored records"),
    touch: Optional[str] = typer.Option(None, help="Merge policy for touching spans: inclusive | strict"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    try:
        if touch is not None:
            touch = parse_touch(touch, "--touch")
        settings = load_settings().override(store_dir=store_dir, namespace=namespace, touch=touch)
        store = KeyedProgressStore(JsonDirectoryStore(settings.store_dir), settings.namespace, settings.touch)
    except ValueError as e:
        raise _fail(str(e))
    ctx.obj = _State(settings=settings, store=store)


def _bar(record: ProgressRecord) -> str:
    segs = coverage_segments(record)
    cells = []
    for i in range(BAR_WIDTH):
        mid = (i + 0.5) / BAR_WIDTH * 100
        hit = any(left <= mid < left + width for left, width in segs)
        cells.append("[green]█[/]" if hit else "[grey50]·[/]")
    return "".join(cells)


def _summary(record: ProgressRecord) -> str:
    pct = calculate_progress_percentage(record)
    duration = format_timestamp(record.timeline_duration) if record.timeline_duration else "?"
    return (f"[bold]{pct}%[/] watched • {format_timestamp(record.total_watched)} of {duration}"
            f" • resume at {format_timestamp(resume_position(record))}")


@app.command()
def show(
    ctx: typer.Context,
    timeline_id: str,
    duration: float = typer.Option(0.0, help="Duration to assume when nothing is stored yet"),
) -> None:
    """Show coverage, gaps and percentage for one timeline."""
    state: _State = ctx.obj
    try:
        record = state.store.load(TimelineId(timeline_id), duration)
    except (WatchspanError, ValueError) as e:
        raise _fail(str(e))

    console.print(_summary(record))
    if record.timeline_duration:
        console.print(_bar(record))

    table = Table(title=f"{timeline_id}", show_lines=False)
    table.add_column("kind")
    table.add_column("start", justify="right")
    table.add_column("end", justify="right")
    table.add_column("length", justify="right")
    rows = [("watched", iv) for iv in record.intervals] + [("gap", iv) for iv in unwatched_ranges(record)]
    for kind, iv in sorted(rows, key=lambda r: r[1].start):
        style = "green" if kind == "watched" else "yellow"
        table.add_row(f"[{style}]{kind}[/]", format_timestamp(iv.start), format_timestamp(iv.end),
                      f"{iv.duration:.1f}s")
    console.print(table)


@app.command()
def record(
    ctx: typer.Context,
    timeline_id: str,
    start: float,
    end: float,
    duration: float = typer.Option(0.0, help="Duration to use when nothing is stored yet"),
) -> None:
    """Fold one watched span [START, END] into the stored progress."""
    state: _State = ctx.obj
    try:
        outcome = record_span(
            store=state.store, timeline_id=TimelineId(timeline_id),
            interval=Interval(start, end), fallback_duration=duration, touch=state.settings.touch,
        )
    except (WatchspanError, ValueError) as e:
        raise _fail(str(e))
    console.print(_summary(outcome.record))
    if outcome.milestone is not None:
        console.print(f"[bold green]milestone[/]: {outcome.milestone}% of {timeline_id} watched")


@app.command()
def resume(ctx: typer.Context, timeline_id: str) -> None:
    """Print the position playback should restart from."""
    state: _State = ctx.obj
    try:
        record = state.store.load(TimelineId(timeline_id), 0.0)
    except (WatchspanError, ValueError) as e:
        raise _fail(str(e))
    console.print(format_timestamp(resume_position(record)))


def _apply_event(session: PlaybackSession, token: str) -> None:
    kind, _, rest = token.partition(":")
    args = [float(x) for x in rest.split(":")] if rest else []
    arity = {"play": 1, "pause": 1, "seek": 1, "skip": 2, "ended": 0, "duration": 1}
    if kind not in arity or len(args) != arity[kind]:
        raise ValueError(f"bad event {token!r}")
    if kind == "play": session.play(*args)
    elif kind == "pause": session.pause(*args)
    elif kind == "seek": session.seek(*args)
    elif kind == "skip": session.skip(*args)
    elif kind == "ended": session.ended()
    else: session.metadata_loaded(*args)


@app.command()
def replay(
    ctx: typer.Context,
    timeline_id: str,
    events: list[str] = typer.Argument(..., help="play:T pause:T seek:T skip:T:DELTA ended duration:D"),
    duration: float = typer.Option(0.0, help="Duration to use when nothing is stored yet"),
) -> None:
    """Feed a recorded player event log through the playback policy and save the result."""
    state: _State = ctx.obj
    s = state.settings
    try:
        session = PlaybackSession.open(
            state.store, TimelineId(timeline_id), duration,
            min_span=s.min_span, seek_credit=s.seek_credit, touch=s.touch,
        )
        for token in events:
            _apply_event(session, token)
    except (WatchspanError, ValueError) as e:
        raise _fail(str(e))
    console.print(_summary(session.record))


if __name__ == "__main__":
    app()
