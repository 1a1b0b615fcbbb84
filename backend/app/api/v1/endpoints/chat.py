from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app import crud, models, schemas
from app.api import deps
from app.services.assistant import ConversationService

router = APIRouter()


def get_owned_conversation(
    conversation_id: int,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> models.Conversation:
    conversation = crud.conversation.get_for_user(db, conversation_id=conversation_id, user_id=current_user.id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@router.post("/conversations", response_model=schemas.Conversation)
def create_conversation(
    *,
    conversation_in: Optional[schemas.ConversationCreate] = None,
    service: ConversationService = Depends(deps.get_conversation_service),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Start a conversation; it opens with the assistant's greeting.
    """
    return service.start_conversation(current_user.id, conversation_in or schemas.ConversationCreate())


@router.get("/conversations/{conversation_id}/messages", response_model=List[schemas.ConversationMessage])
def read_messages(
    conversation: models.Conversation = Depends(get_owned_conversation),
    service: ConversationService = Depends(deps.get_conversation_service),
) -> Any:
    return service.get_messages(conversation)


@router.post("/conversations/{conversation_id}/messages", response_model=schemas.ConversationReply)
async def send_message(
    *,
    message_in: schemas.ConversationMessageCreate,
    conversation: models.Conversation = Depends(get_owned_conversation),
    service: ConversationService = Depends(deps.get_conversation_service),
) -> Any:
    """
    Send a user turn and wait for the assistant's reply.

    Turns for one conversation are answered in the order they were sent.
    If the assistant fails, the reply is the fixed fallback message with
    ``is_fallback`` set.
    """
    user_message, assistant_message = await service.send_message(conversation, message_in.content)
    return {"user_message": user_message, "assistant_message": assistant_message}
