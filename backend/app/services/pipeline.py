import logging
from dataclasses import dataclass, field

import requests

from app.models.entities import VocabularyList, VocabularyTerm
from app.services.generation import GeneratedTerm, GenerationClient, GenerationError
from app.services.store import NewTerm, TermStore


@dataclass
class EnrichmentResult:
    vocabulary_list: VocabularyList
    terms: list[VocabularyTerm]
    generated_terms: int = 0
    generated_stories: int = 0
    story_failures: list[str] = field(default_factory=list)


class EnrichmentPipeline:
    """
    Make sure a (language, domain, level) triple has a persisted, story-enriched term set.

    Each call re-reads the current state before generating anything, so a list
    only ever moves forward: no list, list without terms, terms missing
    stories, fully enriched. Calling again once enriched costs two reads.
    """

    def __init__(self, store: TermStore, generator: GenerationClient) -> None:
        self._store = store
        self._generator = generator
        self._logger = logging.getLogger(__name__)

    def ensure_terms(
        self,
        language: str,
        domain: str,
        level: str,
        source_url: str | None = None,
    ) -> EnrichmentResult:
        vocabulary_list = self._store.find_latest_list(language, domain, level)
        if vocabulary_list is None:
            vocabulary_list = self._store.create_list(language, domain, level, source_url=source_url)

        terms = self._store.find_terms(vocabulary_list.id)
        if not terms:
            return self._generate_list_terms(vocabulary_list)

        missing = [term for term in terms if not term.story]
        if not missing:
            self._logger.debug("List %d already enriched (%d terms)", vocabulary_list.id, len(terms))
            return EnrichmentResult(vocabulary_list=vocabulary_list, terms=terms)

        return self._fill_missing_stories(vocabulary_list, terms, missing)

    def _generate_list_terms(self, vocabulary_list: VocabularyList) -> EnrichmentResult:
        language, domain = vocabulary_list.language, vocabulary_list.domain
        self._logger.info(
            "Generating terms for list %d (language=%s domain=%s level=%s)",
            vocabulary_list.id,
            language,
            domain,
            vocabulary_list.level,
        )
        generated = self._generator.generate_terms(language, domain)
        stories = self._generator.generate_stories_for_terms(generated, language, domain)

        new_terms = [
            NewTerm(term=item.term, definition=item.definition, story=stories.get(item.term) or None)
            for item in generated
        ]
        persisted = self._store.insert_terms(vocabulary_list.id, new_terms)
        failures = [item.term for item in new_terms if item.story is None]
        return EnrichmentResult(
            vocabulary_list=vocabulary_list,
            terms=persisted,
            generated_terms=len(persisted),
            generated_stories=len(new_terms) - len(failures),
            story_failures=failures,
        )

    def _fill_missing_stories(
        self,
        vocabulary_list: VocabularyList,
        terms: list[VocabularyTerm],
        missing: list[VocabularyTerm],
    ) -> EnrichmentResult:
        self._logger.info(
            "List %d has %d of %d terms without a story", vocabulary_list.id, len(missing), len(terms)
        )
        try:
            stories = self._generator.generate_stories_for_terms(
                [GeneratedTerm(term=term.term, definition=term.definition) for term in missing],
                vocabulary_list.language,
                vocabulary_list.domain,
            )
        except (GenerationError, requests.RequestException) as exc:
            self._logger.warning(
                "Story enrichment for list %d failed, returning terms as they are: %s",
                vocabulary_list.id,
                exc,
            )
            return EnrichmentResult(
                vocabulary_list=vocabulary_list,
                terms=terms,
                story_failures=[term.term for term in missing],
            )

        written = 0
        failures: list[str] = []
        for term in missing:
            story = stories.get(term.term)
            if not story:
                failures.append(term.term)
                continue
            self._store.update_term_story(vocabulary_list.id, term.term, story)
            written += 1

        return EnrichmentResult(
            vocabulary_list=vocabulary_list,
            terms=self._store.find_terms(vocabulary_list.id),
            generated_stories=written,
            story_failures=failures,
        )
