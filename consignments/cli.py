# Flask CLI commands (run with FLASK_APP=wsgi.py):
# - flask seed-demo
#   Idempotent demo data: one manager, two owners with RVs, one renter, bookings,
#   a maintenance ticket and a pending expense. Password for every demo user: demo1234
# - flask sync-crm
#   Push every owner, booking and maintenance request to HubSpot.
# - flask crm-webhooks
#   Create the HubSpot webhook subscriptions that /api/webhooks/hubspot handles.

from datetime import date, timedelta

import click
from flask.cli import with_appcontext

from consignments.extensions import db
from consignments.integrations.hubspot import HubSpotError
from consignments.models import Asset, Booking, User
from consignments.services import (
    AssetService,
    AuthService,
    BookingService,
    CrmSyncService,
    ExpenseService,
    MaintenanceService,
)

DEMO_PASSWORD = "demo1234"

DEMO_USERS = (
    ("manager@demo.com", "Fleet Manager", "manager", None),
    ("owner1@demo.com", "Dana Reyes", "owner", "Reyes RV Rentals"),
    ("owner2@demo.com", "Sam Patel", "owner", "Patel Adventures"),
    ("renter@demo.com", "Jordan Lee", "renter", None),
)

DEMO_ASSETS = (
    ("owner1@demo.com", {"name": "2021 Winnebago View", "year": 2021, "make": "Winnebago", "model": "View",
                         "rv_type": "Class C", "sleeps": 4, "base_price_per_night": 175, "status": "available"}),
    ("owner1@demo.com", {"name": "2019 Airstream Flying Cloud", "year": 2019, "make": "Airstream",
                         "model": "Flying Cloud", "rv_type": "Travel Trailer", "sleeps": 6,
                         "base_price_per_night": 140, "status": "available"}),
    ("owner2@demo.com", {"name": "2022 Thor Chateau", "year": 2022, "make": "Thor", "model": "Chateau",
                         "rv_type": "Class C", "sleeps": 8, "base_price_per_night": 200, "status": "available"}),
)


def _ensure_user(email, full_name, role, business_name):
    user = User.query.filter_by(email=email).first()
    if user:
        click.echo(f"SKIP {role} {email} already exists")
        return user
    user = AuthService.register_user(full_name, email, DEMO_PASSWORD, role, business_name=business_name)
    click.echo(f"PASS Created {role} {email}")
    return user


@click.command("seed-demo")
@with_appcontext
def seed_demo():
    """Load demo users, RVs, bookings and tickets."""
    users = {email: _ensure_user(email, name, role, business) for email, name, role, business in DEMO_USERS}

    assets = []
    for owner_email, attrs in DEMO_ASSETS:
        owner = users[owner_email].owner
        asset = Asset.query.filter_by(owner_id=owner.id, name=attrs["name"]).first()
        if not asset:
            asset = AssetService.build_asset(owner, attrs)
            db.session.add(asset)
            db.session.commit()
            click.echo(f"PASS Created asset {asset.name}")
        assets.append(asset)

    if Booking.query.count():
        click.echo("SKIP bookings already seeded")
        return

    renter = users["renter@demo.com"].renter
    today = date.today()
    for index, asset in enumerate(assets, start=1):
        start = today - timedelta(days=30 - index * 7)
        booking = BookingService.create_booking(
            {
                "asset_id": asset.id,
                "renter_id": renter.id,
                "start_date": start.isoformat(),
                "end_date": (start + timedelta(days=3 + index)).isoformat(),
                "status": "confirmed",
            },
            booking_number=BookingService.generate_booking_number(index),
        )
        if index < len(assets):
            BookingService.update_booking(booking.id, {"status": "completed"})
        click.echo(f"PASS Created booking {booking.booking_number}")

    ticket = MaintenanceService.create_request(
        {
            "asset_id": assets[0].id,
            "title": "Awning motor sticking",
            "description": "Awning stalls halfway when extending.",
            "priority": "HIGH",
            "category": "exterior",
        },
        reported_by=users["manager@demo.com"].id,
        ticket_number=MaintenanceService.generate_ticket_number(1),
    )
    click.echo(f"PASS Created maintenance ticket {ticket.ticket_number}")

    ExpenseService.create_expense(
        {
            "asset_id": assets[0].id,
            "maintenance_request_id": ticket.id,
            "category": "repair",
            "amount": 240,
            "description": "Awning motor replacement",
            "vendor": "Desert RV Service",
        }
    )
    click.echo("PASS Created pending expense")


@click.command("sync-crm")
@with_appcontext
def sync_crm():
    """Push all owners, bookings and maintenance requests to HubSpot."""
    if not CrmSyncService.client().enabled:
        raise click.ClickException("HUBSPOT_ACCESS_TOKEN is not configured.")
    synced, failed = CrmSyncService.bulk_sync()
    for key in synced:
        click.echo(f"{key}: {synced[key]} synced, {failed.get(key, 0)} failed")


@click.command("crm-webhooks")
@with_appcontext
def crm_webhooks():
    """Subscribe to the contact, deal and ticket events the webhook endpoint handles."""
    if not CrmSyncService.client().enabled:
        raise click.ClickException("HUBSPOT_ACCESS_TOKEN is not configured.")
    try:
        created, existing = CrmSyncService.ensure_webhook_subscriptions()
    except HubSpotError as exc:
        raise click.ClickException(exc.message) from exc
    for event_type in existing:
        click.echo(f"SKIP {event_type} already subscribed")
    for event_type in created:
        click.echo(f"PASS Subscribed to {event_type}")


def register_commands(app):
    app.cli.add_command(seed_demo)
    app.cli.add_command(sync_crm)
    app.cli.add_command(crm_webhooks)
