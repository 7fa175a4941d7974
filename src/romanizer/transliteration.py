"""
OpenAI-backed transliteration of subtitle chunks from Hindi to Hinglish.
"""

import asyncio
import json
import logging
from typing import Any

from openai import AsyncOpenAI, OpenAI, OpenAIError

from .config import Settings
from .decisions import DECISIONS, AlwaysTransliterate, WordDecisionStrategy
from .errors import ConfigurationError, ServiceInvocationFailure

logger = logging.getLogger("romanizer")

SRT_OUTPUT_KEY = "hinglish_srt_content"
TEXT_OUTPUT_KEY = "hinglish_text"
WORD_CHOICE_TOOL_NAME = "word_choice"

SRT_SYSTEM_PROMPT = (
    "You convert Hindi text to Hinglish (Hindi written in the Roman alphabet) and specialise "
    "in subtitles for a music production channel. You receive part of an SRT subtitle file. "
    "Convert all Hindi text to Hinglish while keeping the SRT structure exactly as it is.\n"
    "Rules:\n"
    "- Every subtitle entry is an index number, a timecode line and text lines. Never change "
    "the index numbers or the timecodes, and keep one blank line between entries.\n"
    "- Convert only the Hindi text. For ordinary phrases use a standard Hinglish spelling, "
    'e.g. "मैं नहीं करूँगा" becomes "Mai Nahi Karunga".\n'
    "- Words that are common in English or are technical terms, music terms in particular, "
    'take their standard English spelling rather than a phonetic one: "पियानो" is "Piano", '
    'not "piyaano"; "गिटार" is "Guitar"; "स्टूडियो" is "Studio".\n'
    f'Respond with a JSON object of the form {{"{SRT_OUTPUT_KEY}": "<converted SRT text>"}}.'
)

UNKNOWN_WORDS_SYSTEM_PROMPT = (
    "You convert Hindi text to Hinglish (Hindi written in the Roman alphabet). "
    f"For every word listed as unknown, call the {WORD_CHOICE_TOOL_NAME} tool to find out whether "
    "to transliterate it or keep it in its original Hindi form, and use that form in the result. "
    f'Respond with a JSON object of the form {{"{TEXT_OUTPUT_KEY}": "<converted text>"}}.'
)

WORD_CHOICE_TOOL = {
    "type": "function",
    "function": {
        "name": WORD_CHOICE_TOOL_NAME,
        "description": "Decide whether a Hindi word is transliterated to Hinglish or kept in Hindi.",
        "parameters": {
            "type": "object",
            "properties": {
                "word": {"type": "string", "description": "The Hindi word to handle."},
            },
            "required": ["word"],
        },
    },
}


def build_srt_messages(srt_content: str) -> list[dict[str, Any]]:
    return [
        {"role": "system", "content": SRT_SYSTEM_PROMPT},
        {"role": "user", "content": srt_content},
    ]


def build_unknown_words_messages(text: str, unknown_words: list[str]) -> list[dict[str, Any]]:
    words = "\n".join(f"- {w}" for w in unknown_words)
    return [
        {"role": "system", "content": UNKNOWN_WORDS_SYSTEM_PROMPT},
        {"role": "user", "content": f"Unknown words:\n{words}\n\nText:\n{text}"},
    ]


def parse_json_content(content: str | None, key: str) -> str:
    """Extract ``key`` from the model's JSON reply."""
    if not content or not content.strip():
        raise ServiceInvocationFailure("Model returned an empty response")
    try:
        payload = json.loads(content)
    except json.JSONDecodeError:
        start = content.find("{")
        end = content.rfind("}")
        if start == -1 or end == -1:
            raise ServiceInvocationFailure("Model did not return valid JSON") from None
        try:
            payload = json.loads(content[start : end + 1])
        except json.JSONDecodeError:
            raise ServiceInvocationFailure("Model did not return valid JSON") from None

    value = payload.get(key) if isinstance(payload, dict) else None
    if not isinstance(value, str):
        raise ServiceInvocationFailure(f"Model response is missing the '{key}' field")
    return value.strip()


def answer_tool_calls(message: Any, strategy: WordDecisionStrategy) -> list[dict[str, Any]]:
    """Echo the assistant's tool calls and answer each one with the strategy's decision."""
    calls = message.tool_calls
    out: list[dict[str, Any]] = [
        {
            "role": "assistant",
            "content": message.content,
            "tool_calls": [
                {
                    "id": c.id,
                    "type": "function",
                    "function": {"name": c.function.name, "arguments": c.function.arguments},
                }
                for c in calls
            ],
        }
    ]
    for call in calls:
        if call.function.name != WORD_CHOICE_TOOL_NAME:
            raise ServiceInvocationFailure(f"Model called an unknown tool: {call.function.name}")
        try:
            word = json.loads(call.function.arguments or "{}")["word"]
        except (json.JSONDecodeError, KeyError, TypeError):
            raise ServiceInvocationFailure(
                f"Malformed {WORD_CHOICE_TOOL_NAME} arguments: {call.function.arguments!r}"
            ) from None
        decision = strategy.decide(word)
        if decision not in DECISIONS:
            raise ValueError(f"Word decision must be one of {DECISIONS}, got {decision!r}")
        out.append({"role": "tool", "tool_call_id": call.id, "content": decision})
    return out


class _OpenAITransliteratorBase:
    def __init__(
        self,
        client: Any,
        model: str = "gpt-4o-mini",
        temperature: float = 0.1,
        strategy: WordDecisionStrategy | None = None,
        max_tool_rounds: int = 8,
    ) -> None:
        if client is None:
            raise ConfigurationError("OpenAI client is not initialized (missing OPENAI_API_KEY)")
        self.client = client
        self.model = model
        self.temperature = temperature
        self.strategy = strategy
        self.max_tool_rounds = max_tool_rounds

    def _request(self, messages: list[dict[str, Any]], strategy: WordDecisionStrategy | None) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }
        if strategy is not None:
            kwargs["tools"] = [WORD_CHOICE_TOOL]
        return kwargs

    def _too_many_rounds(self) -> ServiceInvocationFailure:
        return ServiceInvocationFailure(
            f"Model kept calling {WORD_CHOICE_TOOL_NAME} after {self.max_tool_rounds} rounds"
        )


class OpenAITransliterator(_OpenAITransliteratorBase):
    """Transliteration service over the synchronous OpenAI client."""

    def transliterate(self, text: str) -> str:
        logger.debug(f"Requesting transliteration of {len(text)} characters with {self.model}")
        return self._complete(build_srt_messages(text), SRT_OUTPUT_KEY, self.strategy)

    def handle_unknown_words(self, text: str, unknown_words: list[str]) -> str:
        """Convert plain text, consulting the word strategy for each listed word."""
        strategy = self.strategy or AlwaysTransliterate()
        return self._complete(build_unknown_words_messages(text, unknown_words), TEXT_OUTPUT_KEY, strategy)

    def _complete(self, messages: list[dict[str, Any]], key: str, strategy: WordDecisionStrategy | None) -> str:
        for _ in range(self.max_tool_rounds + 1):
            try:
                response = self.client.chat.completions.create(**self._request(messages, strategy))
            except OpenAIError as e:
                logger.error(f"OpenAI request failed: {e}")
                raise ServiceInvocationFailure(f"OpenAI request failed: {e}") from e
            message = response.choices[0].message
            if strategy is not None and message.tool_calls:
                messages = messages + answer_tool_calls(message, strategy)
                continue
            return parse_json_content(message.content, key)
        raise self._too_many_rounds()


class AsyncOpenAITransliterator(_OpenAITransliteratorBase):
    """Transliteration service over the asynchronous OpenAI client."""

    async def transliterate(self, text: str) -> str:
        logger.debug(f"Requesting transliteration of {len(text)} characters with {self.model}")
        return await self._complete(build_srt_messages(text), SRT_OUTPUT_KEY, self.strategy)

    async def handle_unknown_words(self, text: str, unknown_words: list[str]) -> str:
        strategy = self.strategy or AlwaysTransliterate()
        return await self._complete(build_unknown_words_messages(text, unknown_words), TEXT_OUTPUT_KEY, strategy)

    async def _complete(
        self, messages: list[dict[str, Any]], key: str, strategy: WordDecisionStrategy | None
    ) -> str:
        for _ in range(self.max_tool_rounds + 1):
            try:
                response = await self.client.chat.completions.create(**self._request(messages, strategy))
            except OpenAIError as e:
                logger.error(f"OpenAI request failed: {e}")
                raise ServiceInvocationFailure(f"OpenAI request failed: {e}") from e
            message = response.choices[0].message
            if strategy is not None and message.tool_calls:
                # strategy.decide may block on input()
                messages = messages + await asyncio.to_thread(answer_tool_calls, message, strategy)
                continue
            return parse_json_content(message.content, key)
        raise self._too_many_rounds()


def build_service(
    settings: Settings,
    strategy: WordDecisionStrategy | None = None,
    *,
    use_async: bool = False,
) -> OpenAITransliterator | AsyncOpenAITransliterator:
    """Create an OpenAI client from settings and wrap it in a transliteration service."""
    if not settings.openai_api_key:
        raise ConfigurationError("OPENAI_API_KEY is not set. Put it in .env or environment.")

    client_cls = AsyncOpenAI if use_async else OpenAI
    client = client_cls(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=settings.request_timeout,
    )
    service_cls = AsyncOpenAITransliterator if use_async else OpenAITransliterator
    return service_cls(
        client,
        model=settings.model,
        temperature=settings.temperature,
        strategy=strategy,
        max_tool_rounds=settings.max_tool_rounds,
    )
