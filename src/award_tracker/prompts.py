"""
Prompt + chat message builders for the inference gateway.

Owned by `award_tracker.inference`. The model's JSON output is never parsed
here or anywhere else in the service; the client does that.
"""

from __future__ import annotations

import mimetypes
from typing import Any, Dict, List

from .config import PublisherContext
from .schemas import AnalyzeRequest, DiscoverRequest, ManuscriptRequest

Message = Dict[str, Any]

SYSTEM_PROMPT = (
    "You are a helpful assistant. Always respond with valid JSON only. "
    "No markdown, no code fences, no explanation. Just the raw JSON."
)

DEFAULT_DOCUMENT_MEDIA_TYPE = "application/pdf"


def _lines(*parts: str) -> str:
    out: List[str] = []
    for p in parts:
        t = str(p or "").strip()
        if t:
            out.append(t)
    return "\n\n".join(out)


def _publisher_line(ctx: PublisherContext) -> str:
    return f'indie publisher ({ctx.publisher}), "{ctx.title}" ({ctx.description}).'


def discover_prompt(req: DiscoverRequest, ctx: PublisherContext) -> str:
    return _lines(
        f'Find literary awards matching: "{req.query.strip()}"',
        f"Context: {_publisher_line(ctx)}\nAlready tracking: {req.existing_names() or 'none'}",
        "Return 3–5 NEW awards not already in the list above.\n"
        "JSON array only:\n"
        '[{"name":"...","url":"...","notes":"2-3 sentences on eligibility","deadline":"..."}]',
    )


def analyze_prompt(req: AnalyzeRequest, ctx: PublisherContext) -> str:
    url = (req.award_url or "").strip()
    subject = f'List submission requirements for the literary award "{req.award_name.strip()}"'
    if url:
        subject += f" ({url})"
    return _lines(
        subject + ".",
        f"Publisher context: {_publisher_line(ctx)}\n"
        "Include: entry fees, physical copy requirements + mailing address, digital format, "
        "supporting docs, eligibility rules, deadlines.",
        "JSON array, max 8 items:\n"
        '[{"id":"1","text":"Specific actionable requirement","done":false}]',
    )


def manuscript_prompt(file_name: str, ctx: PublisherContext) -> str:
    label = f' ("{file_name}")' if file_name else ""
    return _lines(
        f"Analyse this manuscript{label} for an indie publisher ({ctx.publisher}) seeking literary awards.\n"
        "Then suggest 4–6 real awards that best match its genre, themes, length, and publisher type.",
        "Return ONLY valid JSON (no markdown fences):\n"
        '{"title":"...","genres":["..."],"themes":["..."],"style":"...","audience":"...",'
        '"wordCount":"...","matchedAwards":[{"name":"...","url":"...","notes":"...",'
        '"deadline":"...","matchReason":"..."}]}',
    )


def document_media_type(file_name: str) -> str:
    guessed, _ = mimetypes.guess_type(file_name or "")
    if guessed and (guessed == DEFAULT_DOCUMENT_MEDIA_TYPE or guessed.startswith("image/")):
        return guessed
    return DEFAULT_DOCUMENT_MEDIA_TYPE


def manuscript_content(req: ManuscriptRequest, ctx: PublisherContext) -> List[Dict[str, Any]]:
    """
    Multi-part user content.

    With a document payload: a data-URL part followed by the instruction part.
    Without one: the extracted text inlined ahead of the instruction, as a single part.
    """
    file_name = (req.file_name or "").strip()
    instruction = manuscript_prompt(file_name, ctx)
    if req.has_document:
        data_url = f"data:{document_media_type(file_name)};base64,{req.manuscript_base64.strip()}"
        return [
            {"type": "image_url", "image_url": {"url": data_url}},
            {"type": "text", "text": instruction},
        ]
    return [{"type": "text", "text": f"MANUSCRIPT TEXT:\n\n{req.manuscript_text}\n\n---\n\n{instruction}"}]


def build_messages(req: Any, ctx: PublisherContext) -> List[Message]:
    """
    Chat messages for one gateway request.

    Manuscript requests never carry a system role: some OpenAI-compatible proxies reject
    a system message alongside multi-part content.
    """
    if isinstance(req, DiscoverRequest):
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": discover_prompt(req, ctx)},
        ]
    if isinstance(req, AnalyzeRequest):
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": analyze_prompt(req, ctx)},
        ]
    if isinstance(req, ManuscriptRequest):
        return [{"role": "user", "content": manuscript_content(req, ctx)}]
    raise TypeError(f"Unsupported request: {type(req).__name__}")
