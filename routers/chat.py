# routers/chat.py

from fastapi import APIRouter, Body, Depends

from auth import get_current_user
from errors import ValidationError
from helpers import envelope
from schemas import ChatIn
from utils.chat_proxy import ask_assistant

router = APIRouter(prefix="/ai", tags=["chat"])


@router.post("/chat", dependencies=[Depends(get_current_user)])
def chat(body: ChatIn = Body(...)):
    message = (body.message or "").strip()
    if not message:
        raise ValidationError("Message is required")
    return envelope(ask_assistant(message))
