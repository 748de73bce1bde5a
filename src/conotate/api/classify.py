"""Classification, description and model proxy endpoints."""

import logging
import time
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException

from conotate.api.dependencies import get_classifier, get_model_client
from conotate.classification.descriptions import describe_texts
from conotate.llm_client import ModelError
from conotate.models import (
    ChatCompletionRequest,
    ClassifyRequest,
    ClassifyResponse,
    DescribeRequest,
    DescribeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["classify"])


@router.post("/classify", response_model=ClassifyResponse)
async def classify(request: ClassifyRequest) -> ClassifyResponse:
    """Pick a section for the text among the caller's sections.

    Model failures fall back to keyword classification, so this endpoint
    always answers.
    """
    classifier = get_classifier()
    result = await classifier.classify(request.text, request.available_sections)
    return ClassifyResponse(section_id=result.section_id, confidence=result.confidence)


@router.post("/describe", response_model=DescribeResponse)
async def describe(request: DescribeRequest) -> DescribeResponse:
    """Generate a one or two sentence description from the given notes."""
    description = await describe_texts(
        [n.text for n in request.notes], request.section_name, get_model_client()
    )
    return DescribeResponse(description=description)


@router.post("/llm/chat/completions")
async def chat_completions(request: ChatCompletionRequest) -> dict[str, Any]:
    """Forward a chat-completions request through the configured model backend."""
    client = get_model_client()
    if client is None:
        raise HTTPException(status_code=503, detail="Model backend not configured")

    model = request.model or client.model_name
    try:
        content = await client.chat(
            [m.model_dump() for m in request.messages],
            max_tokens=request.max_tokens,
            temperature=request.temperature,
            model=model,
        )
    except ModelError as e:
        logger.warning("Proxy completion failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e)) from e

    return {
        "id": f"chatcmpl-{uuid.uuid4().hex}",
        "object": "chat.completion",
        "created": int(time.time()),
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }
