"""
Custom Flask CLI commands.

These commands are registered with the app via ``register_commands()``
in the application factory. Run them with ``flask <command_name>``.

Usage::

    flask data-check                  # Verify the data files and records
    flask upcoming-events --range 3   # List events in the next 3 months
    flask notify-preview              # Show reminders due today
"""

from datetime import datetime

import click
from flask import current_app
from flask.cli import with_appcontext

from assettrack.extensions import store
from assettrack.services import (
    asset_service,
    event_service,
    notification_service,
    pagination_service,
    settings_service,
    view_service,
)
from assettrack.services.date_service import parse_flexible_date
from assettrack.store import ASSETS_FILE, CONFIG_FILE, SUB_ASSETS_FILE


@click.command("data-check")
@with_appcontext
def data_check_command():
    """
    Verify the data directory and sanity-check the stored records.

    Confirms the JSON files can be read, then reports components whose
    parent no longer exists, warranties with unreadable dates and
    maintenance schedules that are skipped when events are collected.
    """
    click.echo("=" * 60)
    click.echo("  AssetTrack — Data Check")
    click.echo("=" * 60)
    click.echo(f"\n  Data directory: {store.data_dir}\n")

    # -- Step 1: Files -----------------------------------------------------
    click.echo("[1/3] Checking data files...")
    for filename in (ASSETS_FILE, SUB_ASSETS_FILE, CONFIG_FILE):
        path = store.path_for(filename)
        if path.exists():
            click.secho(f"      ✓ {filename} ({path.stat().st_size} bytes)", fg="green")
        elif filename == CONFIG_FILE:
            click.secho(f"      ⚠ {filename} not found; defaults will be used.", fg="yellow")
        else:
            click.secho(f"      ✗ {filename} not found.", fg="red")

    asset_records = asset_service.get_asset_records()
    sub_records = asset_service.get_sub_asset_records()
    assets, sub_assets = asset_service.load_all()
    click.echo(f"\n      {len(assets)} asset(s), {len(sub_assets)} component(s)")

    # -- Step 2: Hierarchy -------------------------------------------------
    click.echo("[2/3] Checking component parents...")
    asset_ids = {asset.id for asset in assets}
    sub_ids = {sub.id for sub in sub_assets}
    orphans = [
        sub
        for sub in sub_assets
        if sub.parent_id not in asset_ids
        or (sub.is_sub_component and sub.parent_sub_id not in sub_ids)
    ]
    if orphans:
        for sub in orphans:
            click.secho(f"      ⚠ {sub.id} ({sub.name}) has a missing parent.", fg="yellow")
    else:
        click.secho("      ✓ Every component has a parent.", fg="green")

    # -- Step 3: Dates and schedules ---------------------------------------
    click.echo("[3/3] Checking warranty dates and maintenance schedules...")
    problems = 0
    for item in [*assets, *sub_assets]:
        for label, warranty in item.warranties:
            if warranty.is_lifetime or not warranty.expiration_date:
                continue
            if parse_flexible_date(warranty.expiration_date) is None:
                problems += 1
                click.secho(
                    f"      ⚠ {item.id} ({item.name}): unreadable {label.lower()} "
                    f"warranty date {warranty.expiration_date!r}",
                    fg="yellow",
                )

    raw_counts = {
        str(record.get("id")): len(record.get("maintenanceEvents") or [])
        for record in [*asset_records, *sub_records]
        if isinstance(record, dict)
    }
    for item in [*assets, *sub_assets]:
        skipped = raw_counts.get(item.id, 0) - len(item.maintenance_events)
        if skipped > 0:
            problems += 1
            click.secho(
                f"      ⚠ {item.id} ({item.name}): {skipped} maintenance schedule(s) skipped",
                fg="yellow",
            )

    click.echo("\n" + "=" * 60)
    if orphans or problems:
        click.secho(
            f"  {len(orphans)} orphaned component(s), {problems} record problem(s).",
            fg="yellow",
            bold=True,
        )
    else:
        click.secho("  All checks passed. Data looks good.", fg="green", bold=True)
    click.echo("=" * 60)


@click.command("upcoming-events")
@click.option("--range", "date_range", default=None, help="Date-range token: past, all, N months or specific:YYYY-MM-DD.")
@click.option("--type", "event_type", default=event_service.EVENT_TYPE_ALL, type=click.Choice(["all", "warranty", "maintenance"]))
@click.option("--filter", "bucket", default=None, help="Dashboard card to filter by (e.g. within30).")
@click.option("--desc", is_flag=True, help="Newest first.")
@with_appcontext
def upcoming_events_command(date_range, event_type, bucket, desc):
    """List warranty and maintenance events for a date range."""
    state = view_service.DashboardState(
        bucket=bucket or None,
        event_type=event_type,
        sort_direction=pagination_service.DESCENDING if desc else pagination_service.ASCENDING,
        date_range=event_service.WindowSpec.from_token(
            date_range or current_app.config.get("DEFAULT_EVENTS_RANGE")
        ).to_token(),
    )
    assets, sub_assets = asset_service.load_all()
    config = view_service.DashboardConfig.from_settings(current_app.config)
    try:
        view = view_service.build_dashboard_view(assets, sub_assets, state, config)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    rows = view_service.build_event_rows(view.events, view.now, sub_assets)
    if not rows:
        click.echo("No events found.")
        return

    for row in rows:
        line = f"{row.formatted_date}  {row.days_text:>14}  {row.type_label:<11}  {row.name}: {row.details}"
        if row.parent_label:
            line += f"  (Parent: {row.parent_label})"
        colour = {view_service.OVERDUE: "red", view_service.URGENT: "yellow"}.get(row.urgency)
        click.secho(line, fg=colour)
    click.echo(f"\n{len(rows)} event(s), range {state.date_range}")


@click.command("notify-preview")
@click.option("--date", "on_date", default=None, help="Preview as of this date (YYYY-MM-DD); defaults to today.")
@with_appcontext
def notify_preview_command(on_date):
    """Show the warranty and maintenance reminders that are due."""
    now = datetime.now()
    if on_date:
        now = parse_flexible_date(on_date)
        if now is None:
            raise click.BadParameter(f"Unreadable date {on_date!r}", param_hint="--date")

    assets, sub_assets = asset_service.load_all()
    flags = settings_service.notification_settings()
    notices = notification_service.due_notices(assets, sub_assets, flags, now)

    if not notices:
        click.echo(f"No reminders due on {now.date().isoformat()}.")
        return

    for notice in notices:
        if notice.kind == notification_service.WARRANTY_EXPIRING:
            click.echo(
                f"{notice.title} for {notice.name} expires in {notice.days} days "
                f"({notice.due_date.date().isoformat()})"
            )
        else:
            click.echo(
                f"Maintenance '{notice.title}' for {notice.name} due "
                f"{notice.due_date.date().isoformat()}"
            )
    click.echo(f"\n{len(notices)} reminder(s)")


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(data_check_command)
    app.cli.add_command(upcoming_events_command)
    app.cli.add_command(notify_preview_command)
