"""Answer generation — ground an LLM completion in the scraped sources.

Uses the ``openai`` SDK's ``AsyncOpenAI`` client against Groq's
OpenAI-compatible endpoint.  One completion per question; the model is told
to answer strictly from the supplied sources and to cite them.
"""

from __future__ import annotations

import logging

from openai import AsyncOpenAI

from researchbot.models import ChatResponse, Source

logger = logging.getLogger(__name__)

NO_SOURCES_ANSWER = (
    "I couldn't extract any content from the provided URLs. "
    "Please check the URLs and try again."
)
EMPTY_COMPLETION_ANSWER = "No answer could be generated."

_SYSTEM_PROMPT = """\
You are an AI assistant that provides accurate, contextual answers based \
strictly on the given sources. Always cite your sources and be transparent \
about the information's origin.
"""

TEMPERATURE = 0.3
TOP_P = 0.8


class AnswerGenerationError(Exception):
    """The hosted model call failed."""


def build_context(sources: list[Source]) -> str:
    """Join sources as ``[Source: url]`` blocks separated by blank lines."""
    return "\n\n".join(f"[Source: {s.url}]\n{s.content}" for s in sources)


class AnswerGenerator:
    """Ask the hosted model a question grounded in scraped sources."""

    def __init__(self, client: AsyncOpenAI, model: str, max_tokens: int = 1024) -> None:
        self._client = client
        self.model = model
        self.max_tokens = max_tokens
        logger.info("AnswerGenerator initialized (model=%s)", model)

    async def generate(self, query: str, sources: list[Source]) -> ChatResponse:
        """Return the model's answer together with the sources it was given.

        With no sources the canned fallback answer is returned and the model
        is not called.

        Raises
        ------
        AnswerGenerationError
            The completion request failed for any reason.
        """
        if not sources:
            return ChatResponse(answer=NO_SOURCES_ANSWER, sources=[])

        context = build_context(sources)
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": _SYSTEM_PROMPT},
                    {"role": "user", "content": f"Context:\n{context}\n\nQuestion: {query}"},
                ],
                max_tokens=self.max_tokens,
                temperature=TEMPERATURE,
                top_p=TOP_P,
            )
        except Exception as exc:
            logger.error("Completion request failed (model=%s)", self.model, exc_info=True)
            raise AnswerGenerationError("Failed to generate AI response") from exc

        answer = ""
        if completion.choices:
            answer = completion.choices[0].message.content or ""
        logger.info(
            "Generated answer (%d chars) from %d sources for '%s'",
            len(answer),
            len(sources),
            query[:80],
        )
        return ChatResponse(answer=answer or EMPTY_COMPLETION_ANSWER, sources=sources)

    async def aclose(self) -> None:
        await self._client.close()
