from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.conversation import Conversation, ConversationMessage
from app.schemas.conversation import ConversationCreate
from app.utils.timezone import now_local


class CRUDConversation(CRUDBase[Conversation, ConversationCreate, ConversationCreate]):
    def create_with_user(
        self, db: Session, *, obj_in: ConversationCreate, user_id: int
    ) -> Conversation:
        db_obj = Conversation(title=obj_in.title, user_id=user_id, message_count=0, is_active=True)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_for_user(self, db: Session, *, conversation_id: int, user_id: int) -> Optional[Conversation]:
        return (
            db.query(self.model)
            .filter(Conversation.id == conversation_id)
            .filter(Conversation.user_id == user_id)
            .filter(Conversation.is_active == True)
            .first()
        )


class CRUDConversationMessage(CRUDBase[ConversationMessage, ConversationCreate, ConversationCreate]):
    def append(
        self,
        db: Session,
        *,
        conversation: Conversation,
        role: str,
        content: str,
        is_fallback: bool = False,
        response_time_ms: Optional[int] = None,
    ) -> ConversationMessage:
        db_obj = ConversationMessage(
            conversation_id=conversation.id,
            role=role,
            content=content,
            is_fallback=is_fallback,
            response_time_ms=response_time_ms,
        )
        db.add(db_obj)
        # Increment in SQL; the caller's copy of the conversation may be stale
        db.query(Conversation).filter(Conversation.id == conversation.id).update(
            {
                Conversation.message_count: func.coalesce(Conversation.message_count, 0) + 1,
                Conversation.last_message_at: now_local(),
            },
            synchronize_session=False,
        )
        db.commit()
        db.refresh(db_obj)
        db.refresh(conversation)
        return db_obj

    def get_conversation_messages(self, db: Session, *, conversation_id: int) -> List[ConversationMessage]:
        return (
            db.query(self.model)
            .filter(ConversationMessage.conversation_id == conversation_id)
            .order_by(ConversationMessage.id.asc())
            .all()
        )


conversation = CRUDConversation(Conversation)
conversation_message = CRUDConversationMessage(ConversationMessage)
