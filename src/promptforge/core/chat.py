"""Chat personas and conversation assembly.

The chat tab talks to the remote model with one of two personas.  The
*expert* persona knows the structured prompt format and answers with a bare
JSON prompt when the user asks for a change; the *generalist* is a plain
assistant.  Each persona keeps its own conversation.

When the expert persona is used while a prompt is being edited, a system turn
carrying the current prompt as JSON is inserted just before the new user turn
so the model can modify it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from .models import ChatTurn, StructuredPrompt, prompt_to_json

logger = logging.getLogger(__name__)

PersonaName = Literal["expert", "generalist"]

PROMPT_PROPOSAL_TEXT = "Here is a prompt proposal:"
PROMPT_APPLIED_TEXT = "Done, the prompt has been updated in the editor!"


@dataclass(frozen=True)
class Persona:
    """System instruction and greetings of one chat persona."""

    name: str
    system_instruction: str
    greeting: str
    greeting_with_prompt: str | None = None

    def initial_message(self, has_prompt: bool) -> str:
        if has_prompt and self.greeting_with_prompt:
            return self.greeting_with_prompt
        return self.greeting


def expert_instruction(language: str) -> str:
    return f"""You are a chatbot expert in writing prompts for AI image generators. Your goal is to help the user create or refine a prompt.
- **Mockups:** For mockups (t-shirts, etc.), use the wording "Full blank [object]" and never use the word "mockup" in the JSON output.
- **Prompt structure:** You know the JSON structure the application uses: an object with keys (subject, style, etc.), where each key holds an object with "value" (string) and "alternatives" (array of 4 strings).
- **Prompt changes:** If the user asks for a change that should update the prompt (e.g. "add a field for the weather", "make the style more vintage", "take inspiration from this image"), you MUST reply **ONLY** with the complete, updated JSON object of the prompt. Put NO text before or after it, and no markdown. You may add, remove or modify keys in the JSON.
- **Standard replies:** For any other question, answer normally in {language}, concisely and helpfully."""


def build_personas(language: str) -> dict[PersonaName, Persona]:
    """Return the available personas, with replies requested in *language*."""
    return {
        "expert": Persona(
            name="Prompt Expert",
            system_instruction=expert_instruction(language),
            greeting=(
                "Hello! I am your prompt expert assistant. How can I help you "
                "create the perfect prompt today?"
            ),
            greeting_with_prompt=(
                "I see you are working on a prompt. How can I help you improve it? "
                "You can ask me to modify a field, add one, or change the style "
                "based on text or an image."
            ),
        ),
        "generalist": Persona(
            name="Generalist",
            system_instruction=(
                "You are a helpful general-purpose AI assistant. Answer the user's "
                "questions clearly and concisely."
            ),
            greeting="Hello! How can I help you today?",
        ),
    }


def build_user_content(text: str, image_data_url: str | None = None) -> list[dict[str, Any]]:
    """Build the content parts of a user message (text and/or image)."""
    parts: list[dict[str, Any]] = []
    if text.strip():
        parts.append({"type": "text", "text": text})
    if image_data_url:
        parts.append({"type": "image_url", "image_url": {"url": image_data_url}})
    return parts


def context_turn(prompt: StructuredPrompt) -> ChatTurn:
    """System turn telling the model which prompt the user is working on."""
    return ChatTurn(
        role="system",
        content=f"CONTEXT: The user is currently working on this JSON prompt: {prompt_to_json(prompt)}",
    )


def turn_to_message(turn: ChatTurn) -> dict[str, Any]:
    """Convert a chat turn to an API message.

    User turns become a list of content parts; an assistant turn that proposed
    a prompt also carries that prompt so the model sees what it suggested.
    """
    if turn.role == "user":
        return {"role": "user", "content": build_user_content(turn.content, turn.image_data_url)}
    content = turn.content
    if turn.prompt is not None:
        content = f"{content}\n{prompt_to_json(turn.prompt)}"
    return {"role": turn.role, "content": content}


@dataclass
class ChatSession:
    """One conversation per persona, started with the persona greeting."""

    personas: dict[PersonaName, Persona]
    conversations: dict[PersonaName, list[ChatTurn]] = field(default_factory=dict)

    def reset(self, persona: PersonaName, has_prompt: bool = False) -> list[ChatTurn]:
        """Start a new conversation for *persona* and return it."""
        greeting = self.personas[persona].initial_message(has_prompt)
        self.conversations[persona] = [ChatTurn(role="assistant", content=greeting)]
        logger.debug(f"Started new {persona} conversation")
        return self.conversations[persona]

    def turns(self, persona: PersonaName, has_prompt: bool = False) -> list[ChatTurn]:
        if persona not in self.conversations:
            return self.reset(persona, has_prompt)
        return self.conversations[persona]

    def append(self, persona: PersonaName, turn: ChatTurn) -> None:
        self.turns(persona).append(turn)

    def request_history(
        self,
        persona: PersonaName,
        current_prompt: StructuredPrompt | None,
    ) -> list[ChatTurn]:
        """History to send for the latest user turn.

        The greeting and earlier turns are sent as they are, except
        display-only turns such as request error notices.  For the expert
        persona with a prompt being edited, a context system turn is inserted
        before the last (new) user turn.
        """
        history = [turn for turn in self.turns(persona) if not turn.display_only]
        if persona == "expert" and current_prompt:
            insert_at = len(history) - 1 if history and history[-1].role == "user" else len(history)
            history.insert(insert_at, context_turn(current_prompt))
        return history
