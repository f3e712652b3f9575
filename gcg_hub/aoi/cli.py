"""
``flask aoi`` — manage the local AOI store from the command line.

    flask aoi list --year 2025 --status IN_PROGRESS
    flask aoi add "Penguatan SPI" --year 2025 --priority HIGH
    flask aoi progress <aoi_id> 80
    flask aoi add-action <aoi_id> "Susun kebijakan" --assigned-to "Tim Legal"
    flask aoi complete-action <aoi_id> <action_id>
    flask aoi stats --year 2025
    flask aoi init-defaults --year 2025
"""

import json

import click
from flask.cli import AppGroup

from gcg_hub.aoi.models import ACTION_STATUSES, AOI_STATUSES, PRIORITIES, STATUS_COMPLETED
from gcg_hub.aoi.store import get_aoi_store
from gcg_hub.core.exceptions import GCGHubError

aoi_cli = AppGroup("aoi", help="Areas of improvement kept in the local AOI store.")


def _fail(error: GCGHubError):
    raise click.ClickException(str(error))


@aoi_cli.command("list")
@click.option("--year", type=int)
@click.option("--aspect")
@click.option("--status", type=click.Choice(AOI_STATUSES, case_sensitive=False))
@click.option("--priority", type=click.Choice(PRIORITIES, case_sensitive=False))
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON.")
def list_command(year, aspect, status, priority, as_json):
    aois = get_aoi_store().query(
        year=year,
        aspect=aspect,
        status=status.upper() if status else None,
        priority=priority.upper() if priority else None,
    )
    if as_json:
        click.echo(json.dumps([a.to_dict() for a in aois], ensure_ascii=False, indent=2))
        return
    for aoi in aois:
        click.echo(
            f"{aoi.id}  [{aoi.priority:<8}] {aoi.status:<11} {aoi.progress:>3}%  "
            f"{aoi.year}  {aoi.title}"
        )
    click.echo(f"{len(aois)} AOI(s)")


@aoi_cli.command("add")
@click.argument("title")
@click.option("--year", type=int, required=True)
@click.option("--description", default="")
@click.option("--aspect", default="")
@click.option("--priority", type=click.Choice(PRIORITIES, case_sensitive=False), default="MEDIUM")
@click.option("--assigned-to", default="")
@click.option("--due-date")
def add_command(title, year, description, aspect, priority, assigned_to, due_date):
    try:
        aoi = get_aoi_store().create({
            "title": title,
            "year": year,
            "description": description,
            "aspect": aspect,
            "priority": priority,
            "assigned_to": assigned_to,
            "due_date": due_date,
        })
    except GCGHubError as e:
        _fail(e)
    click.echo(f"Created AOI {aoi.id}")


@aoi_cli.command("progress")
@click.argument("aoi_id")
@click.argument("value", type=int)
def progress_command(aoi_id, value):
    try:
        aoi = get_aoi_store().update_progress(aoi_id, value)
    except GCGHubError as e:
        _fail(e)
    click.echo(f"{aoi.id}: {aoi.progress}% ({aoi.status})")


@aoi_cli.command("add-action")
@click.argument("aoi_id")
@click.argument("description")
@click.option("--assigned-to", default="")
@click.option("--due-date")
@click.option("--status", type=click.Choice(ACTION_STATUSES, case_sensitive=False), default="PENDING")
def add_action_command(aoi_id, description, assigned_to, due_date, status):
    try:
        item = get_aoi_store().add_action_item(aoi_id, {
            "description": description,
            "assigned_to": assigned_to,
            "due_date": due_date,
            "status": status,
        })
    except GCGHubError as e:
        _fail(e)
    click.echo(f"Added action item {item.id}")


@aoi_cli.command("complete-action")
@click.argument("aoi_id")
@click.argument("action_id")
def complete_action_command(aoi_id, action_id):
    try:
        item = get_aoi_store().update_action_item(aoi_id, action_id, {"status": STATUS_COMPLETED})
    except GCGHubError as e:
        _fail(e)
    click.echo(f"Action item {item.id} completed at {item.completed_at}")


@aoi_cli.command("stats")
@click.option("--year", type=int, required=True)
def stats_command(year):
    stats = get_aoi_store().stats(year)
    for key, value in stats.items():
        click.echo(f"{key:<12} {value}")


@aoi_cli.command("init-defaults")
@click.option("--year", type=int, help="Defaults to the current year.")
@click.confirmation_option(prompt="Replace all AOIs with the sample data?")
def init_defaults_command(year):
    aois = get_aoi_store().init_defaults(year)
    click.echo(f"AOI store initialised with {len(aois)} AOI(s)")
