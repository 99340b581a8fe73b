"""HubSpot CRM v3 client and the status/stage mappings used by sync and webhooks."""

import logging
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.hubapi.com"

BOOKING_STATUS_TO_DEAL_STAGE = {
    "inquiry": "appointmentscheduled",
    "confirmed": "qualifiedtobuy",
    "checked_in": "presentationscheduled",
    "active": "decisionmakerboughtin",
    "checked_out": "closedwon",
    "completed": "closedwon",
    "cancelled": "closedlost",
}

DEAL_STAGE_TO_BOOKING_STATUS = {
    "appointmentscheduled": "inquiry",
    "qualifiedtobuy": "confirmed",
    "presentationscheduled": "checked_in",
    "decisionmakerboughtin": "active",
    "closedwon": "completed",
    "closedlost": "cancelled",
}

MAINTENANCE_STATUS_TO_TICKET_STAGE = {
    "requested": "1",
    "scheduled": "2",
    "in_progress": "3",
    "completed": "4",
    "cancelled": "5",
}

TICKET_STAGE_TO_MAINTENANCE_STATUS = {stage: status for status, stage in MAINTENANCE_STATUS_TO_TICKET_STAGE.items()}


def deal_stage_for(status):
    return BOOKING_STATUS_TO_DEAL_STAGE.get(status, "appointmentscheduled")


def booking_status_for(deal_stage):
    return DEAL_STAGE_TO_BOOKING_STATUS.get(deal_stage, "inquiry")


def ticket_stage_for(status):
    return MAINTENANCE_STATUS_TO_TICKET_STAGE.get(status, "1")


def maintenance_status_for(ticket_stage):
    return TICKET_STAGE_TO_MAINTENANCE_STATUS.get(str(ticket_stage), "requested")


class HubSpotError(Exception):
    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


@dataclass(frozen=True)
class HubSpotConfig:
    access_token: str = None
    api_url: str = DEFAULT_API_URL
    timeout: float = 10.0

    @property
    def enabled(self):
        return bool(self.access_token)

    @classmethod
    def from_app_config(cls, config):
        return cls(
            access_token=config.get("HUBSPOT_ACCESS_TOKEN") or None,
            api_url=(config.get("HUBSPOT_API_URL") or DEFAULT_API_URL).rstrip("/"),
            timeout=float(config.get("HUBSPOT_TIMEOUT") or 10),
        )


class HubSpotClient:
    """Thin wrapper over the CRM v3 objects API.

    Every call raises ``HubSpotError`` on a non-2xx response or a transport
    failure; callers decide whether that is fatal.
    """

    def __init__(self, config, session=None):
        self.config = config
        self.session = session or requests.Session()

    @property
    def enabled(self):
        return self.config.enabled

    def _headers(self):
        return {
            "Authorization": f"Bearer {self.config.access_token}",
            "Content-Type": "application/json",
        }

    def _request(self, method, path, json=None, params=None):
        if not self.enabled:
            raise HubSpotError("HubSpot access token is not configured.")

        url = f"{self.config.api_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                json=json,
                params=params,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("HubSpot %s %s failed: %s", method, path, exc)
            raise HubSpotError(f"HubSpot request failed: {exc}") from exc

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            message = payload.get("message") or response.text or "unknown error"
            logger.warning("HubSpot %s %s returned %s", method, path, response.status_code)
            raise HubSpotError(f"HubSpot API Error: {message}", response.status_code, payload)

        if not response.content:
            return {}
        return response.json()

    # Contacts
    def create_contact(self, properties):
        return self._request("POST", "/crm/v3/objects/contacts", json={"properties": properties})

    def update_contact(self, contact_id, properties):
        return self._request("PATCH", f"/crm/v3/objects/contacts/{contact_id}", json={"properties": properties})

    def get_contact_by_email(self, email):
        body = {
            "filterGroups": [
                {"filters": [{"propertyName": "email", "operator": "EQ", "value": email}]},
            ],
        }
        data = self._request("POST", "/crm/v3/objects/contacts/search", json=body)
        results = data.get("results") or []
        return results[0] if results else None

    # Deals
    def create_deal(self, properties):
        return self._request("POST", "/crm/v3/objects/deals", json={"properties": properties})

    def update_deal(self, deal_id, properties):
        return self._request("PATCH", f"/crm/v3/objects/deals/{deal_id}", json={"properties": properties})

    def associate_contact_with_deal(self, contact_id, deal_id):
        return self._request(
            "PUT",
            f"/crm/v3/objects/deals/{deal_id}/associations/contacts/{contact_id}/deal_to_contact",
        )

    # Tickets
    def create_ticket(self, properties):
        return self._request("POST", "/crm/v3/objects/tickets", json={"properties": properties})

    def update_ticket(self, ticket_id, properties):
        return self._request("PATCH", f"/crm/v3/objects/tickets/{ticket_id}", json={"properties": properties})

    def get_object(self, object_type, object_id):
        return self._request("GET", f"/crm/v3/objects/{object_type}/{object_id}")

    # Webhooks
    def list_webhook_subscriptions(self):
        return self._request("GET", "/webhooks/v3/subscriptions")

    def create_webhook_subscription(self, event_type, active=True, property_name=None):
        body = {"eventType": event_type, "active": active}
        if property_name:
            body["propertyName"] = property_name
        return self._request("POST", "/webhooks/v3/subscriptions", json=body)
