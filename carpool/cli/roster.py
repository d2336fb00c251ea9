"""
CLI command for viewing a carpool roster.
"""

import json
import sys

import click

from carpool.cli.snapshot import load_snapshot
from carpool.core.roster import available_spots, covered_legs, drivers, passengers
from carpool.exceptions import CarpoolError


@click.command('show')
@click.argument('snapshot', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--format',
    '-f',
    type=click.Choice(['table', 'json'], case_sensitive=False),
    default='table',
    help='Output format (default: table)',
)
def show(snapshot: str, format: str):
    """
    Show the roster of the carpool in a snapshot.

    Examples:

        carpool show downtown.json

        carpool show downtown.json --format json
    """
    try:
        snap = load_snapshot(snapshot)
    except CarpoolError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    carpool = snap.carpool
    event = snap.event
    carpool_drivers = drivers(carpool.participants)
    carpool_passengers = passengers(carpool.participants)
    legs = sorted(leg.value for leg in covered_legs(carpool))

    if format.lower() == 'json':
        output = {
            "carpool_id": carpool.carpool_id,
            "name": carpool.name,
            "event": event.name,
            "carpool_type": carpool.carpool_type.value,
            "drivers": len(carpool_drivers),
            "passengers": len(carpool_passengers),
            "available_spots": available_spots(carpool),
            "max_capacity": carpool.max_capacity,
            "covered_legs": legs,
            "participants": [p.to_dict() for p in carpool.participants],
        }
        click.echo(json.dumps(output, indent=2))
        return

    click.echo(f"{carpool.name} ({carpool.carpool_type.value.replace('-', ' ')})")
    click.echo("=" * 80)
    click.echo(f"Event: {event.name} on {event.date} at {event.time}, {event.location}")
    click.echo(
        f"Drivers: {len(carpool_drivers)}  Passengers: {len(carpool_passengers)}  "
        f"Spots: {len(carpool.participants)}/{carpool.max_capacity}"
    )
    click.echo(f"Covered legs: {', '.join(legs) if legs else 'none'}")
    if not carpool_drivers and carpool.participants:
        click.echo("Driver needed!")
    click.echo()

    header = f"{'ID':<12}  {'Name':<24}  {'Email':<30}  Role"
    click.echo(header)
    click.echo("-" * 80)
    for participant in carpool.participants:
        click.echo(
            f"{participant.participant_id:<12}  "
            f"{participant.name:<24}  "
            f"{participant.email:<30}  "
            f"{participant.role.value}"
        )
