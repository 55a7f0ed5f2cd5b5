"""FastAPI router for conversations.

Every query is filtered by the resolved organization. A conversation of
another organization answers 404, exactly like a missing one.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_organization, TenantQuery
from ..models.conversation import Conversation
from ..tenancy.context import RequestContext
from .schemas import ConversationResponse

router = APIRouter(prefix="/conversations", tags=["Conversations"])


@router.get("", response_model=List[ConversationResponse])
def list_conversations(
    context: RequestContext = Depends(require_organization),
    db: Session = Depends(get_db),
):
    """List the organization's conversations, most recent first."""
    return (
        TenantQuery.scoped_query(db, Conversation, context.organization_id)
        .order_by(Conversation.last_message_at.desc(), Conversation.id.desc())
        .all()
    )


@router.get("/{conversation_id}", response_model=ConversationResponse)
def get_conversation(
    conversation_id: int,
    context: RequestContext = Depends(require_organization),
    db: Session = Depends(get_db),
):
    """Get a single conversation of the organization."""
    return TenantQuery.get_or_404(db, Conversation, conversation_id, context.organization_id)
