# src/plandraft/cli.py
"""
plandraft Command Line Interface (CLI).

A terminal front-end to the plan editor, built with `typer` and `rich`.
Every editing command is one short :class:`~plandraft.editor.facade.PlanEditor`
session against the configured store: hydrate, mutate, flush, close. The
history and autosave engines behave exactly as in a long-lived editor; the
session simply ends after one edit.

Usage
-----
    # Browse the step catalogue
    $ plandraft templates --query timer

    # Create a plan from the starter template, then edit it
    $ plandraft new algebra-1 --title "Linear equations" --target 50
    $ plandraft add algebra-1 guided-practice
    $ plandraft move algebra-1 2 0
    $ plandraft show algebra-1
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Annotated, Any, TypeVar

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from plandraft.core.contracts.plan import STEP_KINDS, Snapshot, StepDraft
from plandraft.core.settings import load_settings
from plandraft.core.store.base import SnapshotStore, StoreError
from plandraft.core.store.factory import open_store
from plandraft.editor.facade import PlanEditor
from plandraft.editor.summary import budget_label, plan_totals, relative_saved_label
from plandraft.editor.templates import find_template, search_templates, starter_snapshot

# PLANDRAFT_* settings may live in .env
load_dotenv()

app = typer.Typer(
    help="plandraft: draft lesson plans with undo and autosave.",
    rich_markup_mode="markdown",
)
console = Console()

T = TypeVar("T")


class PlanNotFoundError(LookupError):
    """The requested plan has never been saved to the configured store."""


# --------------------------------------------------------------------------- #
# Helpers: Rendering
# --------------------------------------------------------------------------- #


def _render_plan(snapshot: Snapshot) -> None:
    """Print the step table and the time budget of one plan."""
    table = Table(title=snapshot.title or snapshot.id, title_justify="left")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Step id", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Title")
    table.add_column("Min", justify="right")
    for position, step in enumerate(snapshot.steps):
        table.add_row(
            str(position), step.id, step.kind, step.title, str(step.duration_minutes)
        )
    console.print(table)

    totals = plan_totals(snapshot)
    style = "bold red" if totals.overflow else "green"
    console.print(
        f"Planned {totals.total_minutes} / {totals.target_minutes} min  "
        f"[{style}]{budget_label(totals)}[/{style}]"
    )
    saved = relative_saved_label(snapshot.updated_at)
    if saved:
        console.print(f"[dim]Last edited: {saved}[/dim]")


def _fail(title: str, detail: object) -> typer.Exit:
    console.print(f"[bold red]❌ {title}:[/bold red] {detail}")
    return typer.Exit(code=1)


# --------------------------------------------------------------------------- #
# Helpers: Editing sessions
# --------------------------------------------------------------------------- #


def _open_store() -> SnapshotStore:
    return open_store(load_settings())


async def _edit_session(plan_id: str, mutate: Callable[[PlanEditor], T]) -> tuple[Snapshot, T]:
    """
    Run ``mutate`` inside one hydrated editor session and persist the result.

    The session starts from an empty placeholder; hydration replaces it with
    the stored plan. A plan that was never stored raises PlanNotFoundError, a
    store that could not be read raises StoreError, and nothing is written.
    """
    editor = PlanEditor(starter_snapshot(plan_id, empty=True), _open_store())
    await editor.open()
    try:
        if not editor.is_stored:
            if editor.last_error is not None:
                raise StoreError(editor.last_error)
            raise PlanNotFoundError(plan_id)
        outcome = mutate(editor)
        saved = await editor.flush()
        if saved.is_err():
            raise StoreError(saved.unwrap_err())
        return editor.plan, outcome
    finally:
        await editor.close()


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Drive a coroutine and turn store failures into a clean exit."""
    try:
        return asyncio.run(coro)
    except PlanNotFoundError as e:
        raise _fail("Plan not found", e) from e
    except StoreError as e:
        raise _fail("Store error", e) from e


def _edit(plan_id: str, mutate: Callable[[PlanEditor], T]) -> tuple[Snapshot, T]:
    return _run(_edit_session(plan_id, mutate))


# --------------------------------------------------------------------------- #
# Commands: Catalogue & plans
# --------------------------------------------------------------------------- #


# Fixed (MyPy): Untyped decorator workaround
@app.command()  # type: ignore[misc]
def templates(
    query: Annotated[
        str | None,
        typer.Option("--query", "-q", help="Case-insensitive filter over titles and groups."),
    ] = None,
) -> None:
    """List the step templates, grouped by category."""
    groups = search_templates(query)
    if not groups:
        console.print(f"[yellow]No templates match {query!r}.[/yellow]")
        return

    for group in groups:
        table = Table(title=group.label, title_justify="left", caption=group.description)
        table.add_column("Template id", style="cyan")
        table.add_column("Kind", style="magenta")
        table.add_column("Title")
        table.add_column("Min", justify="right")
        for part in group.parts:
            table.add_row(part.id, part.kind, part.title, str(part.default_duration))
        console.print(table)


@app.command()  # type: ignore[misc]
def new(
    plan_id: Annotated[str, typer.Argument(help="Id of the plan to create.")],
    title: Annotated[str, typer.Option("--title", "-t", help="Plan title.")] = "New Lesson Plan",
    target: Annotated[
        int | None,
        typer.Option("--target", min=0, help="Target length in minutes (default from settings)."),
    ] = None,
    empty: Annotated[
        bool, typer.Option("--empty", help="Start without the warm-up and mini lesson steps.")
    ] = False,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing plan.")] = False,
) -> None:
    """Create a plan from the starter template and save it."""
    store = _open_store()
    if target is None:
        target = load_settings().default_target_minutes
    snapshot = starter_snapshot(plan_id, title=title, target_minutes=target, empty=empty)

    async def _create() -> Snapshot:
        if not force and await store.load(plan_id) is not None:
            raise _fail("Plan exists", f"{plan_id} (use --force to overwrite)")
        return await store.save(plan_id, snapshot)

    created = _run(_create())
    console.print(
        Panel.fit(f"[bold green]✅ Created[/bold green] [u]{plan_id}[/u]", border_style="green")
    )
    _render_plan(created)


@app.command()  # type: ignore[misc]
def show(plan_id: Annotated[str, typer.Argument(help="Id of the plan to show.")]) -> None:
    """Print a stored plan and its time budget."""
    store = _open_store()
    snapshot = _run(store.load(plan_id))
    if snapshot is None:
        raise _fail("Plan not found", plan_id)
    _render_plan(snapshot)


# --------------------------------------------------------------------------- #
# Commands: Editing
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def add(
    plan_id: Annotated[str, typer.Argument(help="Plan to edit.")],
    template_id: Annotated[str, typer.Argument(help="Template id (see `templates`).")],
    index: Annotated[
        int | None, typer.Option("--index", "-i", help="Insert position (default: end).")
    ] = None,
) -> None:
    """Add a step built from a catalogue template."""
    template = find_template(template_id)
    if template is None:
        raise _fail("Unknown template", template_id)

    plan, step = _edit(plan_id, lambda editor: editor.add_step_from_template(template, index))
    console.print(f"[green]Added[/green] {step.title} [dim]({step.id})[/dim]")
    _render_plan(plan)


@app.command()  # type: ignore[misc]
def insert(
    plan_id: Annotated[str, typer.Argument(help="Plan to edit.")],
    title: Annotated[str, typer.Argument(help="Title of the custom step.")],
    minutes: Annotated[int, typer.Option("--minutes", "-m", min=0, help="Duration.")] = 10,
    kind: Annotated[
        str, typer.Option("--kind", "-k", help=f"One of: {', '.join(STEP_KINDS)}.")
    ] = "activity",
    index: Annotated[
        int | None, typer.Option("--index", "-i", help="Insert position (default: end).")
    ] = None,
) -> None:
    """Add a custom step that is not in the catalogue."""
    if kind not in STEP_KINDS:
        raise typer.BadParameter(f"must be one of {', '.join(STEP_KINDS)}", param_hint="--kind")
    draft = StepDraft.model_validate(
        {"kind": kind, "title": title.strip(), "duration_minutes": minutes, "notes": ""}
    )

    plan, step = _edit(plan_id, lambda editor: editor.add_custom_step(draft, index))
    console.print(f"[green]Inserted[/green] {step.title} [dim]({step.id})[/dim]")
    _render_plan(plan)


@app.command()  # type: ignore[misc]
def duplicate(
    plan_id: Annotated[str, typer.Argument(help="Plan to edit.")],
    step_id: Annotated[str, typer.Argument(help="Step to copy.")],
    index: Annotated[
        int | None,
        typer.Option("--index", "-i", help="Insert position (default: after the original)."),
    ] = None,
) -> None:
    """Copy a step under a new id."""
    plan, copy = _edit(plan_id, lambda editor: editor.duplicate_step(step_id, index))
    if copy is None:
        raise _fail("Step not found", step_id)
    console.print(f"[green]Duplicated[/green] {copy.title} [dim]({copy.id})[/dim]")
    _render_plan(plan)


@app.command()  # type: ignore[misc]
def move(
    plan_id: Annotated[str, typer.Argument(help="Plan to edit.")],
    from_index: Annotated[int, typer.Argument(help="Current position of the step.")],
    to_index: Annotated[int, typer.Argument(help="New position of the step.")],
) -> None:
    """Reorder one step."""
    plan, moved = _edit(plan_id, lambda editor: editor.reorder_steps(from_index, to_index))
    if not moved:
        console.print("[dim]Nothing to move.[/dim]")
    _render_plan(plan)


@app.command()  # type: ignore[misc]
def remove(
    plan_id: Annotated[str, typer.Argument(help="Plan to edit.")],
    step_id: Annotated[str, typer.Argument(help="Step to delete.")],
) -> None:
    """Delete one step."""
    plan, removed = _edit(plan_id, lambda editor: editor.remove_step(step_id))
    if not removed:
        raise _fail("Step not found", step_id)
    console.print(f"[green]Removed[/green] {step_id}")
    _render_plan(plan)


@app.command()  # type: ignore[misc]
def target(
    plan_id: Annotated[str, typer.Argument(help="Plan to edit.")],
    minutes: Annotated[float, typer.Argument(help="New target length (rounded, min 0).")],
) -> None:
    """Set the plan's target length in minutes."""
    plan, _ = _edit(plan_id, lambda editor: editor.set_target_minutes(minutes))
    _render_plan(plan)


@app.command()  # type: ignore[misc]
def rename(
    plan_id: Annotated[str, typer.Argument(help="Plan to edit.")],
    title: Annotated[str, typer.Argument(help="New plan title.")],
) -> None:
    """Change the plan's title."""
    plan, _ = _edit(plan_id, lambda editor: editor.rename(title))
    _render_plan(plan)


if __name__ == "__main__":
    app()
