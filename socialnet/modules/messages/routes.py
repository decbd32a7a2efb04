from fastapi import APIRouter, Depends
from socialnet.core.access import PolicyGateway
from socialnet.core.dependencies import get_gateway
from socialnet.modules.messages.schemas import MessageBody, DirectMessageCreate, MessageResponse
from socialnet.modules.messages.service import MessageService
from typing import List, Optional

router = APIRouter(prefix="/messages", tags=["messages"])


def get_message_service(gateway: PolicyGateway = Depends(get_gateway)) -> MessageService:
    return MessageService(gateway)


@router.post("/direct", response_model=MessageResponse, status_code=201)
async def send_direct_message(
    message: DirectMessageCreate,
    service: MessageService = Depends(get_message_service)
):
    return service.send_direct(message)


@router.get("/direct", response_model=List[MessageResponse])
async def get_inbox(service: MessageService = Depends(get_message_service)):
    """Latest message per conversation"""
    return service.inbox()


@router.get("/direct/{user_id}", response_model=List[MessageResponse])
async def get_conversation(
    user_id: str,
    limit: Optional[int] = None,
    service: MessageService = Depends(get_message_service)
):
    return service.conversation(user_id, limit=limit)


@router.post("/direct/{user_id}/read")
async def mark_conversation_read(
    user_id: str,
    service: MessageService = Depends(get_message_service)
):
    return {"updated": service.mark_conversation_read(user_id)}


@router.post("/groups/{group_id}", response_model=MessageResponse, status_code=201)
async def send_group_message(
    group_id: str,
    message: MessageBody,
    service: MessageService = Depends(get_message_service)
):
    """Members only"""
    return service.send_to_group(group_id, message)


@router.get("/groups/{group_id}", response_model=List[MessageResponse])
async def get_group_messages(
    group_id: str,
    limit: Optional[int] = None,
    service: MessageService = Depends(get_message_service)
):
    return service.group_history(group_id, limit=limit)


@router.post("/{message_id}/read", response_model=MessageResponse)
async def mark_read(
    message_id: str,
    service: MessageService = Depends(get_message_service)
):
    return service.mark_read(message_id)
