from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable

import requests

from app.config import Settings, get_settings
from app.utils.retry import poll_until
from app.utils.text import clean_json_array_text, normalize_term

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Base class for failures talking to the text-generation service."""


class ServiceUnavailable(GenerationError):
    pass


class MalformedResponse(GenerationError):
    def __init__(self, message: str, raw_text: str = "", cleaned_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text
        self.cleaned_text = cleaned_text


class EmptyResponse(GenerationError):
    pass


@dataclass(slots=True, frozen=True)
class GeneratedTerm:
    term: str
    definition: str


class GenerationClient:
    def __init__(
        self,
        settings: Settings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._base_url = settings.generation_base_url.rstrip("/")
        self._timeout = settings.generation_timeout_seconds
        self._max_attempts = max(1, settings.readiness_max_attempts)
        self._interval_ms = max(0, settings.readiness_interval_ms)
        self._term_count = max(1, settings.terms_per_list)
        self._terms_temperature = settings.terms_temperature
        self._terms_max_tokens = settings.terms_max_tokens
        self._story_temperature = settings.story_temperature
        self._story_max_tokens = settings.story_max_tokens
        self._session = session or requests.Session()
        self._ready = False

    def close(self) -> None:
        self._session.close()

    def _is_healthy(self) -> bool:
        try:
            response = self._session.get(f"{self._base_url}/health", timeout=self._timeout)
        except requests.RequestException as exc:
            logger.debug("Health check failed: %s", exc)
            return False
        return response.status_code == 200

    def wait_for_ready(self, max_attempts: int | None = None, interval_ms: int | None = None) -> None:
        attempts = self._max_attempts if max_attempts is None else max(1, max_attempts)
        interval = self._interval_ms if interval_ms is None else max(0, interval_ms)
        if not poll_until(self._is_healthy, attempts, interval):
            self._ready = False
            logger.warning(
                "Generation service at %s not ready after %d attempts", self._base_url, attempts
            )
            raise ServiceUnavailable(
                "The text generation service is not available yet. Please try again shortly."
            )
        if not self._ready:
            logger.info("Generation service at %s is ready", self._base_url)
        self._ready = True

    def _ensure_ready(self) -> None:
        if not self._ready:
            self.wait_for_ready()

    def _complete(self, prompt: str, temperature: float, max_tokens: int, stop: list[str]) -> str:
        self._ensure_ready()
        logger.info("Sending completion request with prompt length=%d", len(prompt))
        payload = {
            "prompt": prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stop": stop,
        }
        try:
            response = self._session.post(
                f"{self._base_url}/completion", json=payload, timeout=self._timeout
            )
            response.raise_for_status()
        except requests.ConnectionError:
            # Force a fresh readiness check before the next call.
            self._ready = False
            raise
        body: Any = response.json()
        content = body.get("content") if isinstance(body, dict) else None
        return content if isinstance(content, str) else ""

    def generate_terms(self, language: str, domain: str) -> list[GeneratedTerm]:
        count = self._term_count
        prompt = (
            f"You are building a vocabulary list for learners of the language '{language}'.\n"
            f"List exactly {count} important technical terms from the domain of {domain}.\n"
            f"Write every term and definition in '{language}'.\n"
            "Return ONLY a JSON array. Each item must be an object with fields:\n"
            "- term: the technical word or phrase\n"
            "- definition: a short, learner-friendly definition\n"
            "Do not add comments, explanations or code fences.\n"
            'Example: [{"term": "API", "definition": "A set of rules that lets programs talk to each other"}]\n'
            "JSON array:"
        )
        raw_text = self._complete(prompt, self._terms_temperature, self._terms_max_tokens, ["###"])
        return self._parse_terms(raw_text, count)

    def _parse_terms(self, raw_text: str, limit: int) -> list[GeneratedTerm]:
        cleaned = clean_json_array_text(raw_text)
        try:
            payload = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            logger.error("Term response was not valid JSON. raw=%r cleaned=%r", raw_text, cleaned)
            raise MalformedResponse("Term response was not valid JSON.", raw_text, cleaned) from exc

        if not isinstance(payload, list) or not payload:
            logger.error("Term response was not a non-empty array. raw=%r cleaned=%r", raw_text, cleaned)
            raise MalformedResponse("Term response must be a non-empty JSON array.", raw_text, cleaned)

        terms: list[GeneratedTerm] = []
        seen: set[str] = set()
        for item in payload:
            term = item.get("term") if isinstance(item, dict) else None
            definition = item.get("definition") if isinstance(item, dict) else None
            if not isinstance(term, str) or not term.strip() or not isinstance(definition, str) or not definition.strip():
                logger.error("Term response item is missing term or definition: %r", item)
                raise MalformedResponse(
                    "Every term item needs a 'term' and a 'definition'.", raw_text, cleaned
                )
            key = normalize_term(term)
            if key in seen:
                continue
            seen.add(key)
            terms.append(GeneratedTerm(term=term.strip(), definition=definition.strip()))
        return terms[:limit]

    def generate_story(self, term: str, definition: str, language: str, domain: str) -> str:
        prompt = (
            f'Generate a short, engaging story (2-3 sentences) that uses the technical term "{term}" in a natural way.\n'
            f"The story should be in {language} and related to the domain of {domain}.\n"
            f'The term "{term}" means: {definition}\n'
            "Make the story educational and memorable."
        )
        content = self._complete(prompt, self._story_temperature, self._story_max_tokens, ["\n\n", "###"])
        story = content.strip()
        if not story:
            raise EmptyResponse(f"No story text returned for term '{term}'.")
        return story

    def generate_stories_for_terms(
        self,
        terms: Iterable[GeneratedTerm],
        language: str,
        domain: str,
    ) -> dict[str, str]:
        terms = list(terms)
        if not terms:
            return {}
        self._ensure_ready()

        stories: dict[str, str] = {}
        for item in terms:
            try:
                stories[item.term] = self.generate_story(item.term, item.definition, language, domain)
            except (GenerationError, requests.RequestException, ValueError) as exc:
                logger.warning("Failed to generate story for term '%s': %s", item.term, exc)
                stories[item.term] = ""
        return stories
