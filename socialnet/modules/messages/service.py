import logging
from socialnet.config.settings import settings
from socialnet.core.access import PolicyGateway
from socialnet.core.errors import NotFound, ValidationFailed
from socialnet.modules.messages.schemas import MessageBody, DirectMessageCreate, MessageResponse
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def _by_created_at(row: Dict[str, Any]) -> str:
    return str(row.get("created_at") or "")


class MessageService:
    def __init__(self, gateway: PolicyGateway):
        self.gateway = gateway

    def _row(self, body: MessageBody, recipient_id: str, group_id: Optional[str]) -> Dict[str, Any]:
        if body.reply_to_id:
            self._check_reply_target(body.reply_to_id, recipient_id, group_id)
        row = {
            "sender_id": self.gateway.uid,
            "recipient_id": recipient_id,
            "content": body.content,
            "group_id": group_id,
        }
        if body.media_url:
            row["media_url"] = body.media_url
            row["media_type"] = body.media_type or "image"
        if body.reply_to_id:
            row["reply_to_id"] = body.reply_to_id
        return row

    def _check_reply_target(self, reply_to_id: str, recipient_id: str, group_id: Optional[str]) -> None:
        """A reply stays in its thread: same group, or the same pair for a DM"""
        target = self.gateway.first("messages", id=reply_to_id)
        if not target:
            raise NotFound("Message to reply to not found")
        if target.get("group_id") != group_id:
            raise ValidationFailed("Replies must stay in the same conversation")
        if group_id is None and {target["sender_id"], target["recipient_id"]} != {self.gateway.uid, recipient_id}:
            raise ValidationFailed("Replies must stay in the same conversation")

    def send_direct(self, message: DirectMessageCreate) -> MessageResponse:
        """Send a DM (group_id null)"""
        if not self.gateway.first("profiles", id=message.recipient_id):
            raise NotFound("Recipient not found")
        row = self.gateway.insert("messages", self._row(message, message.recipient_id, None))
        return MessageResponse(**row)

    def send_to_group(self, group_id: str, message: MessageBody) -> MessageResponse:
        """Send a group message; recipient_id is NOT NULL so it carries the sender"""
        row = self.gateway.insert("messages", self._row(message, self.gateway.uid, group_id))
        logger.debug(f"Group message {row.get('id')} sent to {group_id}")
        return MessageResponse(**row)

    def conversation(self, other_id: str, limit: Optional[int] = None) -> List[MessageResponse]:
        """Direct messages between the caller and other_id, oldest first"""
        uid = self.gateway.uid
        limit = limit or settings.default_page_size
        newest = dict(order_by="created_at", desc=True, limit=limit, group_id=None)
        rows = self.gateway.select("messages", sender_id=uid, recipient_id=other_id, **newest)
        if other_id != uid:
            rows += self.gateway.select("messages", sender_id=other_id, recipient_id=uid, **newest)
        rows.sort(key=_by_created_at)
        return [MessageResponse(**row) for row in rows[-limit:]]

    def inbox(self) -> List[MessageResponse]:
        """Latest direct message per counterpart, newest first"""
        uid = self.gateway.uid
        rows = self.gateway.select("messages", sender_id=uid, group_id=None)
        rows += self.gateway.select("messages", recipient_id=uid, group_id=None)
        rows.sort(key=_by_created_at, reverse=True)
        latest: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            other = row["recipient_id"] if row["sender_id"] == uid else row["sender_id"]
            latest.setdefault(other, row)
        return [MessageResponse(**row) for row in latest.values()]

    def group_history(self, group_id: str, limit: Optional[int] = None) -> List[MessageResponse]:
        """Messages of a group, oldest first; empty for non-members"""
        limit = limit or settings.default_page_size
        rows = self.gateway.select("messages", order_by="created_at", desc=True, limit=limit, group_id=group_id)
        return [MessageResponse(**row) for row in reversed(rows)]

    def mark_read(self, message_id: str) -> MessageResponse:
        """Only the recipient of a DM may mark it read"""
        rows = self.gateway.update("messages", {"read": True}, id=message_id)
        if not rows:
            raise NotFound("Message not found")
        return MessageResponse(**rows[0])

    def mark_conversation_read(self, other_id: str) -> int:
        uid = self.gateway.uid
        unread = self.gateway.select("messages", sender_id=other_id, recipient_id=uid, group_id=None, read=False)
        if not unread:
            return 0
        rows = self.gateway.update(
            "messages", {"read": True},
            sender_id=other_id, recipient_id=uid, group_id=None, read=False
        )
        return len(rows)
