from sqlalchemy import or_

from consignments.errors import AppError
from consignments.extensions import db
from consignments.models import Communication, User
from consignments.models.base import utcnow
from consignments.services.common import parse_int, require_fields


class MessageService:
    @staticmethod
    def list_messages(user_id=None, asset_id=None):
        query = Communication.query.order_by(Communication.created_at.asc(), Communication.id.asc())
        if user_id:
            query = query.filter(or_(Communication.from_user_id == user_id, Communication.to_user_id == user_id))
        if asset_id:
            query = query.filter(Communication.asset_id == asset_id)
        return query.limit(500).all()

    @staticmethod
    def send_message(payload, sender_id):
        require_fields(payload, "to_user_id", "message", message="to_user_id and message are required")
        text = str(payload["message"]).strip()
        if not text:
            raise AppError("Message is required.", 400)

        to_user_id = parse_int(payload["to_user_id"], "to_user_id")
        if not db.session.get(User, to_user_id):
            raise AppError("Recipient not found", 404)

        row = Communication(
            from_user_id=parse_int(payload.get("from_user_id"), "from_user_id", sender_id),
            to_user_id=to_user_id,
            asset_id=parse_int(payload.get("asset_id"), "asset_id"),
            booking_id=parse_int(payload.get("booking_id"), "booking_id"),
            subject=payload.get("subject"),
            message=text,
            message_type=payload.get("message_type") or "general",
        )
        db.session.add(row)
        db.session.commit()
        return row

    @staticmethod
    def mark_read(message_id, reader_id):
        if not message_id:
            raise AppError("Message ID required", 400)
        row = db.session.get(Communication, message_id)
        if not row:
            raise AppError("Message not found", 404)
        if row.to_user_id != reader_id:
            raise AppError("Only the recipient can mark a message as read.", 403)
        row.is_read = True
        row.read_at = utcnow()
        db.session.commit()
        return row

    @staticmethod
    def conversations(user_id):
        """Group a user's messages by partner, newest first, with unread counts."""
        rows = (
            Communication.query.filter(
                or_(Communication.from_user_id == user_id, Communication.to_user_id == user_id)
            )
            .order_by(Communication.created_at.desc(), Communication.id.desc())
            .all()
        )
        grouped = {}
        for row in rows:
            outgoing = row.from_user_id == user_id
            partner_id = row.to_user_id if outgoing else row.from_user_id
            partner = row.receiver if outgoing else row.sender
            conversation = grouped.get(partner_id)
            if conversation is None:
                conversation = {
                    "partner_id": partner_id,
                    "partner": (
                        {"id": partner.id, "full_name": partner.full_name, "email": partner.email} if partner else None
                    ),
                    "asset": {"id": row.asset_id} if row.asset_id else None,
                    "last_message": row.message,
                    "last_message_at": row.created_at.isoformat() if row.created_at else None,
                    "unread_count": 0,
                }
                grouped[partner_id] = conversation
            if row.to_user_id == user_id and not row.is_read:
                conversation["unread_count"] += 1
        return list(grouped.values())
