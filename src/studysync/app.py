"""Interactive CLI application."""
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from studysync.ai import generate_study_structure
from studysync.config import configure_logging, get_db_path
from studysync.dashboard import (
    get_plan_stats, get_progress_color, get_progress_label, module_progress,
    overall_progress, resource_progress, task_label, unit_label,
)
from studysync.exchange import read_import_file, summarize_import, write_export_file
from studysync.models import STAGES, ValidationError
from studysync.planner import run_plan
from studysync.resources import (
    add_module, add_resource, delete_module, delete_resource, edit_module_total,
    new_manual_resource, pick_random_module, rename_resource, resource_from_template,
)
from studysync.store import StudyStore
from studysync.tasks import (
    add_manual_task, click_task, delete_task, settle_task, update_task_amounts,
)
from studysync.tips import request_tip

console = Console()
logger = logging.getLogger(__name__)

STAGE_LABELS = {
    "Foundation": "Foundation (push new progress)",
    "Review": "Strengthen (mix old and new)",
    "Sprint": "Sprint (full simulation)",
}


def show_welcome(store: StudyStore):
    console.print(Panel(
        "[bold]StudySync[/bold]\n[dim]Study tracker with the Piggy Run planner[/dim]\n"
        f"Stage: [cyan]{STAGE_LABELS[store.state.study_stage]}[/cyan]",
        title="Welcome", border_style="magenta",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("run", "Piggy Run: generate today's plan"),
        ("plan", "Today's tasks"),
        ("done", "Settle or un-complete a task"),
        ("edit", "Set a task's amounts"),
        ("delete", "Remove a task"),
        ("tip", "AI tip for a task"),
        ("add", "Add a module to today's plan"),
        ("resources", "Resource library + progress"),
        ("new", "New resource (AI or manual)"),
        ("manage", "Rename / add or delete modules / delete resource"),
        ("stage", "Switch study stage"),
        ("export", "Save all data to a file"),
        ("import", "Load data from a file"),
        ("reset", "Wipe everything"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<12}[/cyan] {desc}")


def ask_int(prompt: str, default: int | None = None, minimum: int = 0) -> int:
    """Prompt until the answer is a whole number >= minimum."""
    while True:
        raw = Prompt.ask(prompt, default=None if default is None else str(default))
        try:
            value = int(str(raw).strip())
        except (TypeError, ValueError):
            console.print("[red]Please enter a whole number.[/red]")
            continue
        if value < minimum:
            console.print(f"[red]Please enter a number of at least {minimum}.[/red]")
            continue
        return value


def choose_from(items: list, label) -> int:
    """Show a numbered list and return the chosen zero-based index."""
    for i, item in enumerate(items, 1):
        console.print(f"  [cyan]{i}[/cyan]) {label(item)}")
    return ask_int("Number", minimum=1) - 1


def choose_task(store: StudyStore):
    tasks = store.state.daily_plan
    if not tasks:
        console.print("[yellow]No tasks planned. Try 'run'.[/yellow]")
        return None
    index = choose_from(tasks, task_label)
    if index >= len(tasks):
        console.print("[red]No such task.[/red]")
        return None
    return tasks[index]


def choose_resource(store: StudyStore):
    resources = store.state.resources
    if not resources:
        console.print("[yellow]The resource library is empty. Try 'new'.[/yellow]")
        return None
    index = choose_from(resources, lambda r: r.name)
    if index >= len(resources):
        console.print("[red]No such resource.[/red]")
        return None
    return resources[index]


def choose_module(resource):
    if not resource.modules:
        console.print("[yellow]This resource has no modules yet.[/yellow]")
        return None
    index = choose_from(
        resource.modules,
        lambda m: f"{m.name} ({m.completed_items}/{m.total_items} {unit_label(m.unit_kind)})",
    )
    if index >= len(resource.modules):
        console.print("[red]No such module.[/red]")
        return None
    return resource.modules[index]


def cmd_run(store: StudyStore):
    result = store.dispatch(run_plan)
    console.print(f"[green]{result.message}[/green]")
    cmd_plan(store)


def cmd_plan(store: StudyStore):
    state = store.state
    if not state.daily_plan:
        console.print("[yellow]Nothing planned yet.[/yellow]")
        return
    table = Table(title="Today's Plan")
    table.add_column("#", justify="right")
    table.add_column("Tag")
    table.add_column("Task", style="cyan")
    table.add_column("Resource")
    table.add_column("Progress", justify="right")
    table.add_column("Status")
    for i, task in enumerate(state.daily_plan, 1):
        status = "[green]Done[/green]" if task.is_completed else ""
        if task.is_ai_loading:
            status += " [magenta]AI...[/magenta]"
        table.add_row(
            str(i), task.tag, task_label(task), task.resource_name,
            f"{task.completed_amount}/{task.target_amount}", status,
        )
    console.print(table)
    for task in state.daily_plan:
        if task.ai_tip:
            console.print(Panel(task.ai_tip, title=task_label(task), border_style="magenta"))
    stats = get_plan_stats(state)
    console.print(f"  Pending: [bold]{stats['pending']}[/bold]  |  "
                  f"Done: [bold]{stats['completed']}[/bold]  |  "
                  f"Review backlog: [bold]{stats['review_backlog']}[/bold]")


def cmd_done(store: StudyStore):
    task = choose_task(store)
    if task is None:
        return
    if not store.dispatch(click_task, task.id):
        console.print(f"[yellow]Marked as not done: {task_label(task)}[/yellow]")
        return
    wrong = ask_int("How many did you get wrong (or need to revisit)?", default=0)
    point = Prompt.ask("Knowledge point to target (optional)", default="")
    item = store.dispatch(settle_task, task.id, wrong, point)
    console.print(f"[green]Settled: {task_label(task)}[/green]")
    if item:
        console.print(f"[yellow]Queued for review: {item.knowledge_point or item.module_name} "
                      f"({item.wrong_count} wrong)[/yellow]")


def cmd_edit(store: StudyStore):
    task = choose_task(store)
    if task is None:
        return
    target = ask_int("Target", default=task.target_amount, minimum=1)
    completed = ask_int("Completed", default=task.completed_amount)
    store.dispatch(update_task_amounts, task.id, target, completed)
    console.print("[green]Task updated.[/green]")


def cmd_delete(store: StudyStore):
    task = choose_task(store)
    if task is None:
        return
    store.dispatch(delete_task, task.id)
    console.print(f"[green]Removed {task_label(task)}.[/green]")


def cmd_tip(store: StudyStore):
    task = choose_task(store)
    if task is None:
        return
    console.print("[dim]Asking for advice...[/dim]")
    tip = asyncio.run(request_tip(store, task.id))
    if tip:
        console.print(Panel(tip, title=task_label(task), border_style="magenta"))


def cmd_add(store: StudyStore):
    resource = choose_resource(store)
    if resource is None:
        return
    if Prompt.ask("Pick the module", choices=["choose", "random"], default="choose") == "random":
        module = pick_random_module(resource)
    else:
        module = choose_module(resource)
    if module is None:
        return
    remaining = module.total_items - module.completed_items
    console.print(f"[dim]{remaining} {unit_label(module.unit_kind)} left in {module.name}[/dim]")
    default = 10 if module.unit_kind == "Questions" else 1
    amount = ask_int("Target for today", default=default, minimum=1)
    store.dispatch(add_manual_task, resource.id, module.id, amount)
    console.print(f"[green]Added {module.name} to today's plan.[/green]")


def cmd_resources(store: StudyStore):
    resources = store.state.resources
    overall = overall_progress(resources)
    color = get_progress_color(overall)
    bar_filled = int(overall / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(f"\n  Overall progress: [bold]{overall:.2f}%[/bold] {bar}\n")
    for resource in resources:
        pct = resource_progress(resource)
        source = "built-in" if resource.is_system else "custom"
        table = Table(title=f"{resource.name} ({source}, {pct:.1f}% {get_progress_label(pct)})")
        table.add_column("Module", style="cyan")
        table.add_column("Done", justify="right")
        table.add_column("%", justify="right")
        for module in resource.modules:
            mpct = module_progress(module)
            mcolor = get_progress_color(mpct)
            table.add_row(
                module.name,
                f"{module.completed_items}/{module.total_items} {unit_label(module.unit_kind)}",
                f"[{mcolor}]{mpct:.1f}[/{mcolor}]",
            )
        console.print(table)


def cmd_new(store: StudyStore):
    mode = Prompt.ask("Create with", choices=["ai", "manual"], default="ai")
    if mode == "ai":
        topic = Prompt.ask("What are you studying?").strip()
        if not topic:
            return
        console.print("[dim]Generating...[/dim]")
        template = generate_study_structure(topic)
        if template is None:
            console.print("[red]Could not generate a plan, please try again.[/red]")
            return
        resource = resource_from_template(template, topic)
    else:
        name = Prompt.ask("Resource name", default="")
        module_name = Prompt.ask("First module", default="Unit 1")
        total = ask_int("Total items", default=100, minimum=1)
        resource = new_manual_resource(name, module_name, total)
    store.dispatch(add_resource, resource)
    console.print(f"[green]Added {resource.name} with {len(resource.modules)} modules.[/green]")


def cmd_manage(store: StudyStore):
    resource = choose_resource(store)
    if resource is None:
        return
    action = Prompt.ask(
        "Action", choices=["rename", "add-module", "edit-total", "delete-module", "delete"], default="add-module",
    )
    if action == "rename":
        store.dispatch(rename_resource, resource.id, Prompt.ask("New name", default=resource.name))
    elif action == "add-module":
        name = Prompt.ask("Module name")
        total = ask_int("Total items", minimum=1)
        store.dispatch(add_module, resource.id, name, total)
    elif action == "edit-total":
        module = choose_module(resource)
        if module:
            total = ask_int("Total items", default=module.total_items)
            store.dispatch(edit_module_total, resource.id, module.id, total)
    elif action == "delete-module":
        module = choose_module(resource)
        if module and Confirm.ask(f"Delete module {module.name} and its tasks?", default=False):
            store.dispatch(delete_module, resource.id, module.id)
    elif action == "delete":
        if Confirm.ask(f"Delete {resource.name} and all its records?", default=False):
            store.dispatch(delete_resource, resource.id)
    console.print("[green]Done.[/green]")


def cmd_stage(store: StudyStore):
    for stage in STAGES:
        marker = " ←" if stage == store.state.study_stage else ""
        console.print(f"  [cyan]{stage:<11}[/cyan] {STAGE_LABELS[stage]}{marker}")
    stage = Prompt.ask("Stage", choices=list(STAGES), default=store.state.study_stage)
    store.set_stage(stage)
    console.print(f"[green]Stage set to {STAGE_LABELS[stage]}.[/green]")


def cmd_export(store: StudyStore):
    file_path = Prompt.ask("Export to", default=str(Path.cwd() / "studysync-backup.json"))
    result = write_export_file(store.state, file_path)
    console.print(f"[green]Exported {result['filename']} ({result['length']} chars)[/green]")


def cmd_import(store: StudyStore):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    new_state = read_import_file(file_path)
    summary = summarize_import(new_state)
    console.print(
        f"Found {summary['resources']} resources, {summary['tasks']} tasks, "
        f"{summary['review_items']} review items, {summary['completed_items']} items completed."
    )
    if not Confirm.ask("[yellow]Importing overwrites everything. Continue?[/yellow]", default=False):
        return
    store.replace_state(new_state)
    console.print("[green]Import complete.[/green]")


def cmd_reset(store: StudyStore):
    if Confirm.ask("[red]Erase all progress, tasks and review items?[/red]", default=False):
        store.reset()
        console.print("[green]Back to a fresh start.[/green]")


COMMANDS = {
    "run": cmd_run,
    "plan": cmd_plan,
    "done": cmd_done,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "tip": cmd_tip,
    "add": cmd_add,
    "resources": cmd_resources,
    "new": cmd_new,
    "manage": cmd_manage,
    "stage": cmd_stage,
    "export": cmd_export,
    "import": cmd_import,
    "reset": cmd_reset,
}


def main(db_path: str | None = None):
    load_dotenv()
    configure_logging(console)
    db_path = db_path or get_db_path()
    store = StudyStore(db_path)
    show_welcome(store)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="plan").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]Keep going, you've got this![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(store)
        except ValidationError as e:
            console.print(f"[red]{e}[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.exception("Command %s failed", choice)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
