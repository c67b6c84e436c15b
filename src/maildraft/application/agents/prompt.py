"""Prompt text for draft producers."""

from __future__ import annotations

from datetime import datetime, timezone

from maildraft.application.ports.draft_producer import DraftRequest
from maildraft.infrastructure.email.threading import snippet

CONTEXT_MESSAGES = 8
BODY_SNIPPET_CHARS = 420

SYSTEM_PROMPT = (
    "You are a concise email drafter. Output only the draft reply text. "
    "Keep it brief, precise, and technical when relevant."
)

AGENT_SYSTEM_PROMPT = """You are a local technical email drafting agent.
Objective: produce a concise, high-quality draft reply for the latest inbound email.

Reasoning policy:
- Use long-term memory only for stable, reusable user and style facts.
- Keep internal reasoning private.

Output policy:
- Return only draft body text.
- No markdown fences or meta commentary.
- No subject line.
- Never claim to send email; the user sends it from their own client.

Tone policy: brief, direct, technical, pragmatic."""


def _iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def format_thread(request: DraftRequest, separator: str = "\n\n---\n\n") -> str:
    """The last few messages of the thread, oldest first."""
    blocks = [
        f"From: {m.from_address}\nAt: {_iso(m.sent_at)}\nBody: {snippet(m.body_text, BODY_SNIPPET_CHARS)}"
        for m in request.messages[-CONTEXT_MESSAGES:]
    ]
    return separator.join(blocks)


def _notes(notes: list[str]) -> str:
    return " | ".join(notes) if notes else "none"


def build_prompt(request: DraftRequest) -> str:
    lines = [
        f"Vibe: {request.vibe}",
        f"User notes: {_notes(request.user_notes)}",
        f"Thread notes: {_notes(request.thread_notes)}",
    ]
    if request.instruction:
        lines.append(f"Extra instruction: {request.instruction}")
    lines += [
        "Write a reply draft for the most recent inbound email in this thread.",
        "Constraints:",
        "- Keep it concise.",
        "- Do not include subject line.",
        "- Do not mention being an AI.",
        "- Ask for clarification only if required.",
        "",
        "Thread context:",
        format_thread(request),
    ]
    return "\n".join(lines)


def build_agent_prompt(request: DraftRequest, long_term_memory: list[str]) -> str:
    """User prompt for the graph producer, with long-term memory injected."""
    memory_lines = [f"- {entry}" for entry in long_term_memory] or ["- (none)"]
    sections = [
        f"Thread ID: {request.thread_id}",
        f"Vibe: {request.vibe}",
        f"Extra instruction: {request.instruction}" if request.instruction else "",
        f"User notes: {_notes(request.user_notes)}",
        f"Thread notes: {_notes(request.thread_notes)}",
        "Long-term memory:\n" + "\n".join(memory_lines),
        "Thread context:\n" + format_thread(request, separator="\n\n"),
        "Task: Draft the reply for the latest inbound message. Keep it short and actionable.",
    ]
    return "\n\n".join(s for s in sections if s)
