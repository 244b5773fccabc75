"""
Chat widget API routes
The browser widget renders what these return and performs navigate_to itself
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from storefront.api.deps import get_visitor_id
from storefront.models.chat import ChatMessage, ChatTurnResult, WidgetState
from storefront.services.chat_widget import ChatWidgetService
from storefront.services.service_factory import get_chat_widget_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


class SendRequest(BaseModel):
    """Send request"""
    message: str = ""
    from_voice: bool = False


class SendResponse(BaseModel):
    """Send response; turn is None when the message was empty"""
    status: str
    turn: Optional[ChatTurnResult] = None


class TranscriptResponse(BaseModel):
    messages: List[ChatMessage]


class VoiceModeRequest(BaseModel):
    enabled: bool


class MuteRequest(BaseModel):
    muted: bool


@router.post("/open", response_model=TranscriptResponse)
async def open_widget(
    visitor_id: str = Depends(get_visitor_id),
    service: ChatWidgetService = Depends(get_chat_widget_service)
):
    """Open the widget; greets on first open"""
    try:
        messages = await service.open_widget(visitor_id)
        return TranscriptResponse(messages=messages)
    except Exception as e:
        logger.error(f"Open widget error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/send", response_model=SendResponse)
async def send(
    req: SendRequest,
    visitor_id: str = Depends(get_visitor_id),
    service: ChatWidgetService = Depends(get_chat_widget_service)
):
    """
    Send one message

    Directives in the bot reply have already been applied when this returns:
    navigate_to carries the route change, theme the resulting theme.
    """
    try:
        turn = await service.send(visitor_id, req.message, from_voice=req.from_voice)
        if turn is None:
            return SendResponse(status="ignored")
        return SendResponse(status="sent", turn=turn)
    except Exception as e:
        logger.error(f"Chat send error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/transcript", response_model=TranscriptResponse)
async def transcript(
    visitor_id: str = Depends(get_visitor_id),
    service: ChatWidgetService = Depends(get_chat_widget_service)
):
    try:
        return TranscriptResponse(messages=await service.transcript(visitor_id))
    except Exception as e:
        logger.error(f"Transcript error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/clear", response_model=TranscriptResponse)
async def clear(
    visitor_id: str = Depends(get_visitor_id),
    service: ChatWidgetService = Depends(get_chat_widget_service)
):
    try:
        return TranscriptResponse(messages=await service.clear(visitor_id))
    except Exception as e:
        logger.error(f"Clear chat error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/state", response_model=WidgetState)
async def state(
    visitor_id: str = Depends(get_visitor_id),
    service: ChatWidgetService = Depends(get_chat_widget_service)
):
    return await service.get_state(visitor_id)


@router.post("/voice", response_model=WidgetState)
async def set_voice_mode(
    req: VoiceModeRequest,
    visitor_id: str = Depends(get_visitor_id),
    service: ChatWidgetService = Depends(get_chat_widget_service)
):
    """Voice mode is switched on when the visitor starts listening"""
    return await service.set_voice_mode(visitor_id, req.enabled)


@router.post("/mute", response_model=WidgetState)
async def set_muted(
    req: MuteRequest,
    visitor_id: str = Depends(get_visitor_id),
    service: ChatWidgetService = Depends(get_chat_widget_service)
):
    return await service.set_muted(visitor_id, req.muted)
