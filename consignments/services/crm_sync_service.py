import re
from dataclasses import dataclass
from datetime import datetime, time, timezone

from flask import current_app

from consignments.extensions import db
from consignments.integrations.hubspot import (
    HubSpotError,
    booking_status_for,
    deal_stage_for,
    maintenance_status_for,
    ticket_stage_for,
)
from consignments.models import Booking, MaintenanceRequest, Owner, User
from consignments.models.maintenance import OPEN_MAINTENANCE_STATUSES

BOOKING_NUMBER_PATTERN = re.compile(r"BK-\d+-\d+")

CONTACT_EVENTS = ("contact.creation", "contact.propertyChange")
DEAL_EVENTS = ("deal.creation", "deal.propertyChange")
TICKET_EVENTS = ("ticket.creation", "ticket.propertyChange")
WEBHOOK_EVENT_TYPES = CONTACT_EVENTS + DEAL_EVENTS + TICKET_EVENTS


@dataclass
class SyncResult:
    """Outcome of a CRM push that follows a successful local write."""

    status: str
    crm_id: str = None
    error: str = None

    @property
    def ok(self):
        return self.status == "synced"

    def to_dict(self):
        return {"status": self.status, "crm_id": self.crm_id, "error": self.error}


def _split_name(full_name):
    parts = (full_name or "").split()
    return (parts[0] if parts else ""), " ".join(parts[1:])


def _closedate_ms(value):
    moment = datetime.combine(value, time.min, tzinfo=timezone.utc)
    return str(int(moment.timestamp() * 1000))


class CrmSyncService:
    @staticmethod
    def client():
        return current_app.extensions["hubspot"]

    @staticmethod
    def _run(label, entity_id, push):
        client = CrmSyncService.client()
        if not client.enabled:
            return SyncResult("skipped", error="HubSpot is not configured.")
        try:
            crm_id = push(client)
        except HubSpotError as exc:
            current_app.logger.warning("HubSpot %s sync failed for %s: %s", label, entity_id, exc.message)
            return SyncResult("failed", error=exc.message)
        return SyncResult("synced", crm_id=str(crm_id) if crm_id is not None else None)

    @staticmethod
    def owner_contact_properties(owner):
        profile = owner.user
        firstname, lastname = _split_name(profile.full_name if profile else owner.business_name)
        return {
            "email": owner.email,
            "firstname": firstname,
            "lastname": lastname,
            "phone": (profile.phone if profile else owner.contact_phone) or "",
            "company": owner.business_name or "",
            "user_role": "owner",
            "revenue_split": str(owner.revenue_split_percentage) if owner.revenue_split_percentage is not None else "",
            "contract_type": owner.contract_type or "standard",
        }

    @staticmethod
    def sync_owner(owner):
        if not owner.email:
            return SyncResult("skipped", error="Owner has no e-mail address.")

        def push(client):
            properties = CrmSyncService.owner_contact_properties(owner)
            existing = client.get_contact_by_email(owner.email)
            if existing:
                contact = client.update_contact(existing["id"], properties)
            else:
                contact = client.create_contact(properties)
            contact_id = contact.get("id") or (existing or {}).get("id")
            owner.hubspot_contact_id = contact_id
            db.session.commit()
            return contact_id

        return CrmSyncService._run("owner", owner.id, push)

    @staticmethod
    def deal_properties(booking):
        asset = booking.asset
        return {
            "dealname": f"{booking.booking_number} - {asset.name if asset else ''}",
            "amount": float(booking.total_amount or 0),
            "dealstage": deal_stage_for(booking.status),
            "closedate": _closedate_ms(booking.end_date),
            "rv_type": asset.rv_type if asset else None,
            "rental_nights": booking.total_nights,
        }

    @staticmethod
    def sync_booking(booking):
        def push(client):
            properties = CrmSyncService.deal_properties(booking)
            if booking.hubspot_deal_id:
                client.update_deal(booking.hubspot_deal_id, properties)
                return booking.hubspot_deal_id

            deal = client.create_deal(properties)
            booking.hubspot_deal_id = deal.get("id")
            db.session.commit()

            renter_email = booking.renter.email if booking.renter else None
            if renter_email:
                contact = client.get_contact_by_email(renter_email)
                if contact:
                    client.associate_contact_with_deal(contact["id"], booking.hubspot_deal_id)
            return booking.hubspot_deal_id

        return CrmSyncService._run("booking", booking.id, push)

    @staticmethod
    def ticket_properties(request_row):
        return {
            "subject": request_row.title,
            "content": request_row.description,
            "hs_pipeline_stage": ticket_stage_for(request_row.status),
            "hs_ticket_priority": request_row.priority or "MEDIUM",
            "asset_name": request_row.asset.name if request_row.asset else None,
            "estimated_cost": str(request_row.estimated_cost) if request_row.estimated_cost is not None else "0",
        }

    @staticmethod
    def sync_maintenance(request_row):
        def push(client):
            properties = CrmSyncService.ticket_properties(request_row)
            if request_row.hubspot_ticket_id:
                client.update_ticket(request_row.hubspot_ticket_id, properties)
                return request_row.hubspot_ticket_id
            ticket = client.create_ticket(properties)
            request_row.hubspot_ticket_id = ticket.get("id")
            db.session.commit()
            return request_row.hubspot_ticket_id

        return CrmSyncService._run("maintenance", request_row.id, push)

    @staticmethod
    def sync_onboarding(owner, asset, form):
        """Push a freshly onboarded owner as a contact plus an onboarding deal.

        Returns ``(contact_result, deal_result)``; the deal is skipped when the
        contact could not be created.
        """
        first_name = (form.get("firstName") or "").strip()
        last_name = (form.get("lastName") or "").strip()

        def push_contact(client):
            properties = {
                "email": owner.contact_email,
                "firstname": first_name,
                "lastname": last_name,
                "phone": owner.contact_phone or "",
                "company": owner.business_name,
                "address": owner.address,
                "city": owner.city,
                "state": owner.state,
                "zip": owner.zip_code,
                "user_role": "owner",
                "onboarding_status": "pending_review",
                "rv_type": asset.rv_type,
                "rv_year": str(asset.year) if asset.year else None,
                "rv_make": asset.make,
                "rv_model": asset.model,
                "vin": asset.vin,
                "desired_price": str(asset.base_price_per_night),
            }
            existing = client.get_contact_by_email(owner.contact_email)
            if existing:
                contact = client.update_contact(existing["id"], properties)
            else:
                contact = client.create_contact(properties)
            owner.hubspot_contact_id = contact.get("id") or (existing or {}).get("id")
            db.session.commit()
            return owner.hubspot_contact_id

        contact_result = CrmSyncService._run("onboarding contact", owner.id, push_contact)
        if not contact_result.ok:
            return contact_result, SyncResult("skipped", error="Contact was not synced.")

        def push_deal(client):
            deal = client.create_deal(
                {
                    "dealname": f"New Owner Onboarding - {first_name} {last_name} - {asset.year or ''} {asset.make or ''}".strip(),
                    "amount": float(asset.base_price_per_night) * 30,
                    "dealstage": "appointmentscheduled",
                    "pipeline": "default",
                    "rv_type": asset.rv_type,
                    "vin": asset.vin,
                }
            )
            client.associate_contact_with_deal(contact_result.crm_id, deal.get("id"))
            return deal.get("id")

        deal_result = CrmSyncService._run("onboarding deal", owner.id, push_deal)
        return contact_result, deal_result

    @staticmethod
    def bulk_sync():
        synced = {"owners": 0, "bookings": 0, "maintenance": 0}
        failed = {"owners": 0, "bookings": 0, "maintenance": 0}

        batches = (
            ("owners", Owner.query.order_by(Owner.id).all(), CrmSyncService.sync_owner),
            ("bookings", Booking.query.filter_by(status="active").order_by(Booking.id).all(), CrmSyncService.sync_booking),
            (
                "maintenance",
                MaintenanceRequest.query.filter(MaintenanceRequest.status.in_(OPEN_MAINTENANCE_STATUSES))
                .order_by(MaintenanceRequest.id)
                .all(),
                CrmSyncService.sync_maintenance,
            ),
        )
        for key, rows, sync in batches:
            for row in rows:
                result = sync(row)
                if result.ok:
                    synced[key] += 1
                else:
                    failed[key] += 1
        return synced, failed

    @staticmethod
    def ensure_webhook_subscriptions():
        """Subscribe to every event type the webhook endpoint handles.

        Returns ``(created, existing)`` lists of event types; CRM errors propagate.
        """
        listing = CrmSyncService.client().list_webhook_subscriptions()
        existing = {row.get("eventType") for row in listing.get("results") or []}
        created = []
        for event_type in WEBHOOK_EVENT_TYPES:
            if event_type in existing:
                continue
            CrmSyncService.client().create_webhook_subscription(event_type)
            created.append(event_type)
        return created, sorted(existing & set(WEBHOOK_EVENT_TYPES))

    # Inbound webhook events
    @staticmethod
    def process_webhook(events):
        handled = 0
        for event in events or []:
            subscription = str(event.get("subscriptionType") or "")
            object_id = event.get("objectId")
            if object_id is None:
                continue
            if subscription in CONTACT_EVENTS:
                CrmSyncService._handle_contact(object_id)
            elif subscription in DEAL_EVENTS:
                CrmSyncService._handle_deal(object_id)
            elif subscription in TICKET_EVENTS:
                CrmSyncService._handle_ticket(object_id)
            else:
                continue
            handled += 1
        db.session.commit()
        return handled

    @staticmethod
    def _handle_contact(object_id):
        properties = CrmSyncService.client().get_object("contacts", object_id).get("properties") or {}
        email = (properties.get("email") or "").strip().lower()
        profile = User.query.filter_by(email=email).first() if email else None
        if not profile:
            current_app.logger.info("HubSpot contact %s has no platform profile (%s)", object_id, email or "no email")
            return

        if properties.get("firstname") and properties.get("lastname"):
            profile.full_name = f"{properties['firstname']} {properties['lastname']}"
        if properties.get("phone"):
            profile.phone = properties["phone"]

        if properties.get("user_role") == "owner" and profile.owner and properties.get("company"):
            profile.owner.business_name = properties["company"]

    @staticmethod
    def _handle_deal(object_id):
        properties = CrmSyncService.client().get_object("deals", object_id).get("properties") or {}
        booking = Booking.query.filter_by(hubspot_deal_id=str(object_id)).first()
        if booking is None:
            match = BOOKING_NUMBER_PATTERN.search(properties.get("dealname") or "")
            if match:
                booking = Booking.query.filter_by(booking_number=match.group(0)).first()
        if booking is None:
            return
        booking.status = booking_status_for(properties.get("dealstage"))
        current_app.logger.info("Booking %s set to %s from HubSpot deal %s", booking.id, booking.status, object_id)

    @staticmethod
    def _handle_ticket(object_id):
        properties = CrmSyncService.client().get_object("tickets", object_id).get("properties") or {}
        request_row = MaintenanceRequest.query.filter_by(hubspot_ticket_id=str(object_id)).first()
        if request_row is None and properties.get("subject"):
            request_row = MaintenanceRequest.query.filter_by(title=properties["subject"]).first()
        if request_row is None:
            return
        request_row.status = maintenance_status_for(properties.get("hs_pipeline_stage"))
        current_app.logger.info(
            "Maintenance %s set to %s from HubSpot ticket %s", request_row.id, request_row.status, object_id
        )
