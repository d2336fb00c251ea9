"""
CLI commands for driver removal.

Provides commands for checking removal authority, previewing the impact of
a removal, executing it, and filing a removal request.
"""

import json
import sys
from typing import Optional

import click

from carpool.cli.snapshot import Snapshot, load_snapshot, save_snapshot
from carpool.core.authority import RemovalAuthorityEvaluator
from carpool.core.models import Participant
from carpool.core.removal import RemovalExecutor
from carpool.core.requests import create_removal_request
from carpool.exceptions import CarpoolError, ParticipantNotFoundError
from carpool.logging_config import set_correlation_id

NOW_FORMATS = ["%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]

snapshot_argument = click.argument('snapshot', type=click.Path(exists=True, dir_okay=False))
target_option = click.option(
    '--target',
    '-t',
    'target_id',
    required=True,
    help='Participant ID of the driver to remove',
)
now_option = click.option(
    '--now',
    type=click.DateTime(formats=NOW_FORMATS),
    default=None,
    help='Evaluate as if it were this local time (default: current time)',
)
format_option = click.option(
    '--format',
    '-f',
    type=click.Choice(['table', 'json'], case_sensitive=False),
    default='table',
    help='Output format (default: table)',
)


def _find_target(snap: Snapshot, target_id: str) -> Participant:
    target = snap.carpool.find_participant(target_id)
    if target is None:
        raise ParticipantNotFoundError(target_id, snap.carpool.carpool_id)
    return target


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group('removal')
def removal():
    """Manage driver removals."""
    pass


@removal.command('check')
@snapshot_argument
@click.option('--actor', '-a', required=True, help='Email of the user asking to remove')
@target_option
@now_option
@format_option
@click.pass_context
def check_authority(ctx, snapshot: str, actor: str, target_id: str, now, format: str):
    """
    Check whether a user may remove a driver.

    Exits with status 2 when the removal is denied.

    Examples:

        carpool removal check downtown.json --actor organizer@example.com --target 1
    """
    try:
        snap = load_snapshot(snapshot)
        target = _find_target(snap, target_id)
        evaluator = RemovalAuthorityEvaluator(ctx.obj.config.removal)
        authority = evaluator.evaluate(actor, snap.carpool, snap.event, target, now)
    except CarpoolError as e:
        _fail(e)

    if format.lower() == 'json':
        click.echo(json.dumps(authority.to_dict(), indent=2))
    elif authority.can_remove:
        click.echo(f"✓ {actor} may remove {target.name}")
        if authority.requires_confirmation:
            click.echo("Confirmation required.")
        for restriction in authority.restrictions:
            click.echo(f"  • {restriction}")
    else:
        click.echo(f"✗ {authority.reason}")

    if not authority.can_remove:
        sys.exit(2)


@removal.command('impact')
@snapshot_argument
@target_option
@now_option
@format_option
@click.pass_context
def show_impact(ctx, snapshot: str, target_id: str, now, format: str):
    """
    Preview what removing a driver would do.

    Examples:

        carpool removal impact downtown.json --target 1 --format json
    """
    try:
        snap = load_snapshot(snapshot)
        target = _find_target(snap, target_id)
        executor = RemovalExecutor(ctx.obj.config.removal)
        impact = executor.assess_impact(snap.carpool, snap.event, target, now)
    except CarpoolError as e:
        _fail(e)

    if format.lower() == 'json':
        click.echo(json.dumps(impact.to_dict(), indent=2))
        return

    click.echo(f"Impact of removing {target.name}")
    click.echo("-" * 60)
    click.echo(f"Remaining drivers: {impact.remaining_drivers}")
    click.echo(f"Affected passengers: {impact.affected_passengers}")
    click.echo(f"Hours until event: {impact.hours_until_event:.1f}")
    if impact.uncovered_legs:
        legs = ", ".join(sorted(leg.value for leg in impact.uncovered_legs))
        click.echo(f"Legs without a driver: {legs}")
    if impact.will_disband:
        click.echo("No drivers will remain - carpool will be disbanded")
    if impact.time_sensitivity:
        click.echo(f"Warning: {impact.time_sensitivity}")


@removal.command('execute')
@snapshot_argument
@click.option('--actor', '-a', required=True, help='Email of the user performing the removal')
@target_option
@click.option('--reason', '-r', required=True, help='Reason for the removal')
@click.option(
    '--output',
    '-o',
    type=click.Path(dir_okay=False),
    default=None,
    help='Write the resulting snapshot to this file',
)
@click.option('--yes', '-y', is_flag=True, help='Skip the confirmation prompt')
@now_option
@click.pass_context
def execute_removal(
    ctx,
    snapshot: str,
    actor: str,
    target_id: str,
    reason: str,
    output: Optional[str],
    yes: bool,
    now,
):
    """
    Remove a driver from a carpool.

    Checks authority first and refuses denied removals. Prints the removal
    result, including all notifications, as JSON.

    Examples:

        carpool removal execute downtown.json -a organizer@example.com -t 1 \\
            -r "Car broke down" --yes --output downtown.json
    """
    set_correlation_id()
    config = ctx.obj.config.removal

    try:
        if not reason.strip():
            raise click.BadParameter("reason must not be empty", param_hint="--reason")

        snap = load_snapshot(snapshot)
        target = _find_target(snap, target_id)
        authority = RemovalAuthorityEvaluator(config).evaluate(
            actor, snap.carpool, snap.event, target, now
        )
        if not authority.can_remove:
            click.echo(f"Removal denied: {authority.reason}", err=True)
            sys.exit(2)

        executor = RemovalExecutor(config)
        impact = executor.assess_impact(snap.carpool, snap.event, target, now)

        if authority.requires_confirmation and not yes:
            for restriction in authority.restrictions:
                click.echo(f"  • {restriction}", err=True)
            if impact.will_disband:
                click.echo("  • This will disband the entire carpool.", err=True)
            click.confirm(
                f"Remove {target.name} from {snap.carpool.name}?",
                abort=True,
                err=True,
            )

        result = executor.execute(snap.carpool, snap.event, target_id, actor, reason, now)

        if output:
            save_snapshot(output, snap.event, result.updated_carpool)
    except CarpoolError as e:
        _fail(e)

    click.echo(json.dumps(result.to_dict(), indent=2))


@removal.command('request')
@snapshot_argument
@click.option('--actor', '-a', required=True, help='Email of the user requesting the removal')
@target_option
@click.option('--reason', '-r', required=True, help='Reason for the request')
def request_removal(snapshot: str, actor: str, target_id: str, reason: str):
    """
    File a removal request for a driver you cannot remove directly.

    Prints the pending request as JSON.
    """
    try:
        snap = load_snapshot(snapshot)
        target = _find_target(snap, target_id)
    except CarpoolError as e:
        _fail(e)

    request = create_removal_request(
        snap.carpool.carpool_id, target.participant_id, actor, reason
    )
    click.echo(json.dumps(request.to_dict(), indent=2))
