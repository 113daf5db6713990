"""
Generator - Talks to the locally hosted Ollama model.

This module handles the generation side of RAG:
1. Builds prompts from retrieved context or quiz content
2. Sends them to Ollama with sampling options
3. Returns the generated text

The rest of the package only relies on the `GenerationService` interface
(`generate` + `is_available`), so tests can swap in a scripted fake.
"""

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import ollama

from netsec_tutor.config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GRADING_PROMPT_TEMPLATE,
    GRADING_TEMPERATURE,
    OLLAMA_BASE_URL,
    OLLAMA_MODEL,
    OLLAMA_TIMEOUT_SECONDS,
    QUESTION_MAX_TOKENS,
    QUESTION_PROMPT_TEMPLATES,
    QUIZ_TEMPERATURE,
    RAG_PROMPT_TEMPLATE,
)

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """Raised when the language model cannot produce a response."""


@dataclass
class LLMResponse:
    """Text returned by the model plus bookkeeping."""

    text: str
    model: str
    completion_tokens: int | None = None


@runtime_checkable
class GenerationService(Protocol):
    """Anything that turns a prompt into generated text."""

    def generate(
        self,
        prompt: str,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> LLMResponse: ...

    def is_available(self) -> bool: ...


def build_context_prompt(question: str, context: list[str]) -> str:
    """RAG prompt: retrieved chunks separated by rules, then the question."""
    return RAG_PROMPT_TEMPLATE.format(context="\n\n---\n\n".join(context), question=question)


def build_question_prompt(content: str, question_type: str, difficulty: str = "medium") -> str:
    """Quiz prompt for one question of the given type."""
    try:
        template = QUESTION_PROMPT_TEMPLATES[question_type]
    except KeyError:
        raise ValueError(f"Unknown question type: {question_type}") from None
    return template.format(content=content, difficulty=difficulty)


def build_grading_prompt(question: str, user_answer: str, correct_answer: str) -> str:
    return GRADING_PROMPT_TEMPLATE.format(
        question=question, user_answer=user_answer, correct_answer=correct_answer
    )


class Generator:
    """
    Ollama-backed generation service.

    Example:
        generator = Generator()
        if generator.is_available():
            response = generator.generate("Explain what a firewall does.")
            print(response.text)
    """

    def __init__(
        self,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: ollama.Client | None = None,
    ):
        """
        Args:
            model: Ollama model name (uses config default if not provided)
            base_url: Ollama server URL
            timeout: HTTP timeout in seconds for each call
            client: Pre-built ollama client (base_url/timeout are ignored)
        """
        self.model = model or OLLAMA_MODEL
        self.base_url = base_url or OLLAMA_BASE_URL
        self._client = client or ollama.Client(
            host=self.base_url,
            timeout=timeout or OLLAMA_TIMEOUT_SECONDS,
        )

    def generate(
        self,
        prompt: str,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> LLMResponse:
        """
        Generate a completion for a prompt.

        Raises:
            GenerationError: If Ollama is unreachable or returns an error
        """
        try:
            response = self._client.generate(
                model=self.model,
                prompt=prompt,
                stream=False,
                options={"temperature": temperature, "num_predict": max_tokens},
            )
        except Exception as e:
            logger.error("Error calling Ollama: %s", e)
            raise GenerationError("Failed to generate response from local LLM") from e

        return LLMResponse(
            text=response["response"],
            model=response["model"] or self.model,
            completion_tokens=response["eval_count"],
        )

    def generate_with_context(
        self,
        question: str,
        context: list[str],
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> LLMResponse:
        """Answer a question from retrieved context chunks."""
        return self.generate(
            build_context_prompt(question, context),
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def list_models(self) -> list[str]:
        """Names of the models installed on the Ollama server ([] if unreachable)."""
        try:
            response = self._client.list()
        except Exception as e:
            logger.warning("Cannot list Ollama models: %s", e)
            return []
        return [m.model for m in response.models if m.model]

    def is_available(self) -> bool:
        """True when the Ollama server answers."""
        try:
            self._client.list()
        except Exception:
            return False
        return True


def generate_question_text(
    generator: GenerationService,
    content: str,
    question_type: str,
    difficulty: str = "medium",
) -> str:
    """Raw model output for one quiz question."""
    response = generator.generate(
        build_question_prompt(content, question_type, difficulty),
        temperature=QUIZ_TEMPERATURE,
        max_tokens=QUESTION_MAX_TOKENS.get(question_type, DEFAULT_MAX_TOKENS),
    )
    return response.text


def generate_grading_text(
    generator: GenerationService,
    question: str,
    user_answer: str,
    correct_answer: str,
) -> str:
    """Raw model output grading one open-ended answer."""
    response = generator.generate(
        build_grading_prompt(question, user_answer, correct_answer),
        temperature=GRADING_TEMPERATURE,
    )
    return response.text
