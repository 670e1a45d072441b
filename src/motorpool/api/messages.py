"""Message API routes. Mounted behind the authentication gate."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from motorpool.auth.dependencies import require_identity
from motorpool.auth.jwt import TokenClaims
from motorpool.db.engine import get_db
from motorpool.errors import MalformedToken
from motorpool.schemas.common import Envelope
from motorpool.schemas.message import MessageCreate, MessageRead
from motorpool.services.message_service import MessageService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> MessageService:
    return MessageService(db)


@router.get("/last-messages", response_model=Envelope[list[MessageRead]])
async def last_messages(svc: MessageService = Depends(_svc)):
    """Latest message of every sender."""
    messages = await svc.last_messages()
    return Envelope(
        message=f"{len(messages)} message(s)",
        data=[MessageRead.model_validate(m) for m in messages],
    )


@router.post("/messages", response_model=Envelope[MessageRead], status_code=201)
async def send_message(
    body: MessageCreate,
    identity: TokenClaims = Depends(require_identity),
    svc: MessageService = Depends(_svc),
):
    try:
        sender = uuid.UUID(identity.user_id)
    except ValueError:
        raise MalformedToken(detail="subject is not a user id")

    message = await svc.send(sender, body.content, to_user_id=body.to_user_id)
    return Envelope(message="Message sent", data=MessageRead.model_validate(message))
