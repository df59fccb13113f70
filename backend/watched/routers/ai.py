"""Chat assistant endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from watched.core.exceptions import BadRequestError
from watched.core.rate_limit import rate_limit
from watched.schemas.ai import ChatRequest, ChatResponse
from watched.services.ai import generate_reply

router = APIRouter(dependencies=[Depends(rate_limit("ai"))])


@router.post("/chat", response_model=ChatResponse)
def chat(payload: ChatRequest) -> ChatResponse:
    if not (payload.prompt or "").strip():
        raise BadRequestError("Prompt is required.")
    return ChatResponse(response=generate_reply(payload.prompt))
