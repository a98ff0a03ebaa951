# src/orchestration/prompts.py — v1
"""Prompt construction for the text-synthesis stage.

Selects the system prompt (conversational vs. document drafting), folds
vision analysis and attachment notes into the user message, and assembles
the final message list.
"""

from __future__ import annotations

import re
from typing import Sequence

from lexassist.attachments.models import AttachmentInfo
from lexassist.llm.models import ImageData, ModelMessage

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful legal assistant AI. Provide general legal information "
    "and guidance, but always remind users to consult with a qualified attorney "
    "for specific legal advice. Be helpful, accurate, and professional. "
    "Please limit your responses to 2 or 3 paragraphs."
)

DRAFT_SYSTEM_PROMPT = """You are a legal document drafting assistant. When drafting documents:

1. Provide ONLY the document content without any conversational text
2. Start directly with the document title as a markdown header (# Title)
3. Use proper markdown formatting with headers (##, ###) for sections
4. Do NOT include phrases like "Here's a draft", "Okay", or "I've prepared"
5. Do NOT add disclaimers, warnings, or questions at the beginning or end
6. Do NOT ask follow-up questions like "Do you want me to modify this?"
7. Simply output the clean, professional legal document

The user understands this is a draft template that requires attorney review."""

VISION_NOTE = (
    " You will receive image analysis from a vision model to help you provide "
    "more comprehensive responses."
)

_DRAFT_VERBS = r"(?:draft|write|create|prepare|generate)"
_DOCUMENT_NOUNS = r"(?:contract|agreement|document|letter|memo|will|lease|terms|policy|clause)"

# Verb before noun, or noun before verb ("the lease I need you to draft")
_DRAFT_PATTERNS = (
    re.compile(rf"\b{_DRAFT_VERBS}\b.*\b{_DOCUMENT_NOUNS}\b", re.IGNORECASE | re.DOTALL),
    re.compile(rf"\b{_DOCUMENT_NOUNS}\b.*\b{_DRAFT_VERBS}\b", re.IGNORECASE | re.DOTALL),
)


def is_draft_request(user_input: str) -> bool:
    """Heuristic: does the input ask for a legal document to be drafted?"""
    return any(p.search(user_input) for p in _DRAFT_PATTERNS)


def format_image_analysis(images: Sequence[ImageData], analyses: Sequence[str]) -> str:
    """Label each analysis with its 1-based index and file name."""
    return "\n\n".join(
        f"Image {i} ({image.file_name}): {analysis}"
        for i, (image, analysis) in enumerate(zip(images, analyses), start=1)
    )


def build_system_prompt(user_input: str, has_image_analysis: bool = False) -> str:
    prompt = DRAFT_SYSTEM_PROMPT if is_draft_request(user_input) else DEFAULT_SYSTEM_PROMPT
    if has_image_analysis:
        prompt += VISION_NOTE
    return prompt


def build_user_message(
    user_input: str,
    image_analysis: str = "",
    attachments: Sequence[AttachmentInfo] = (),
) -> str:
    message = user_input

    if image_analysis:
        message = (
            f"User query: {user_input}\n\n"
            f"Image Analysis: {image_analysis}\n\n"
            "Please provide a comprehensive response considering both the "
            "user's text query and the image analysis."
        )

    if attachments:
        names = ", ".join(a.name for a in attachments)
        message += f"\n\nNote: The user has also uploaded {len(attachments)} file(s): {names}"

    return message


def build_messages(
    user_input: str,
    image_analysis: str = "",
    attachments: Sequence[AttachmentInfo] = (),
    conversation_history: Sequence[ModelMessage] = (),
) -> list[ModelMessage]:
    """Assemble system prompt, prior turns and the current user message."""
    messages = [
        ModelMessage(
            role="system",
            content=build_system_prompt(user_input, bool(image_analysis)),
        )
    ]
    messages.extend(
        ModelMessage(role=turn.role, content=turn.content) for turn in conversation_history
    )
    messages.append(
        ModelMessage(
            role="user",
            content=build_user_message(user_input, image_analysis, attachments),
        )
    )
    return messages
