"""
Chat Router

Validates incoming chat messages and hands them to the chat service.
"""

import logging
import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from catalog_assistant.core.errors import ValidationError
from catalog_assistant.services.chat.response import ChatResult
from catalog_assistant.services.chat.service import ChatService, get_chat_service

logger = logging.getLogger(__name__)

router = APIRouter()


# Schemas
class ChatMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: uuid.UUID = Field(alias="userId")
    message: str


class ChatMessageResponse(ChatResult):
    success: bool = True


# Endpoints
@router.post("/message", response_model=ChatMessageResponse, response_model_exclude_none=True)
async def send_message(
    data: ChatMessageRequest,
    chat_service: ChatService = Depends(get_chat_service),
):
    """Process a user message and return the assistant's answer or quote."""
    message = data.message.strip()
    if not message:
        raise ValidationError("El campo message es requerido y debe ser un texto válido")

    logger.info("[Chat] User %s: %s", data.user_id, message)
    result = await chat_service.process_message(data.user_id, message)
    return ChatMessageResponse(**result.model_dump())
