from fastapi import APIRouter, Depends, Query, status

from config import settings
from routers.deps import get_chat_service
from schemas.base import ErrorResponse
from schemas.chat import ChatMessageCreate, ChatMessageResponse, ChatHistoryResponse
from services.chat_service import ChatService

router = APIRouter(
    responses={404: {"model": ErrorResponse, "description": "Not found"}},
)


@router.post(
    "/users/{user_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    user_id: str,
    payload: ChatMessageCreate,
    service: ChatService = Depends(get_chat_service),
):
    """
    Ask a question on behalf of a user.

    Uses the free monthly quota first, then the newest active bundle.
    Responds 403 when neither is available.
    """
    return service.send_message(user_id, payload.question)


@router.get("/users/{user_id}/messages", response_model=ChatHistoryResponse)
def get_message_history(
    user_id: str,
    limit: int = Query(settings.DEFAULT_HISTORY_LIMIT, ge=1, le=100),
    service: ChatService = Depends(get_chat_service),
):
    """Messages of a user, newest first."""
    return {"messages": service.get_history(user_id, limit)}


@router.get("/messages/{message_id}", response_model=ChatMessageResponse)
def get_message(
    message_id: str,
    service: ChatService = Depends(get_chat_service),
):
    return service.get_by_id(message_id)
