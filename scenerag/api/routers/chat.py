from typing import Optional
from fastapi import APIRouter, Depends, Query, Response

from scenerag.api.dependencies import get_services
from scenerag.api.schemas import CreateConversationRequest, SendMessageRequest
from scenerag.container import Services

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/conversations", status_code=201)
async def create_conversation(body: CreateConversationRequest, services: Services = Depends(get_services)):
    conversation = await services.orchestrator.create_conversation(body.campaign_id)
    return conversation.to_document()


@router.get("/conversations")
async def list_conversations(
    campaign_id: Optional[str] = Query(default=None, alias="campaignId"),
    limit: int = Query(default=20, ge=1, le=100),
    services: Services = Depends(get_services),
):
    conversations = await services.orchestrator.list_conversations(campaign_id, limit)
    return {"conversations": [conversation.to_document() for conversation in conversations]}


@router.get("/conversations/{conversation_id}")
async def get_conversation(conversation_id: str, services: Services = Depends(get_services)):
    conversation = await services.orchestrator.get_conversation(conversation_id)
    return conversation.to_document()


@router.post("/conversations/{conversation_id}/messages", summary="Send a message and get the assistant reply")
async def send_message(
    conversation_id: str, body: SendMessageRequest, services: Services = Depends(get_services)
):
    reply = await services.orchestrator.send_message(conversation_id, body.message)
    return reply.to_document()


@router.delete("/conversations/{conversation_id}", status_code=204)
async def delete_conversation(conversation_id: str, services: Services = Depends(get_services)):
    await services.orchestrator.delete_conversation(conversation_id)
    return Response(status_code=204)
