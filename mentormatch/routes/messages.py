from fastapi import APIRouter, Depends
from typing import List

from mentormatch.models.profile import Profile
from mentormatch.schemas.message import ConversationOut, MarkReadRequest, MessageIn, MessageOut
from mentormatch.services import chat
from mentormatch.services.auth import get_current_user
from mentormatch.store import MentorStore, get_store

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("", response_model=MessageOut, status_code=201)
def send_message(
    payload: MessageIn,
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    message = chat.send_message(store, current_user, payload.receiver_id, payload.to_body())
    return MessageOut.from_message(message)


@router.get("/conversations", response_model=List[ConversationOut])
def list_conversations(store: MentorStore = Depends(get_store), current_user: Profile = Depends(get_current_user)):
    return chat.conversations(store, current_user)


@router.get("/with/{user_id}", response_model=List[MessageOut])
def get_conversation(
    user_id: str,
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    return [MessageOut.from_message(m) for m in chat.conversation(store, current_user, user_id)]


@router.post("/read")
def mark_read(
    payload: MarkReadRequest,
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    updated = chat.mark_read(store, current_user, payload.message_ids)
    return {"updated": updated}
