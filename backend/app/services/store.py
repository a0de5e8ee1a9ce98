from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from app.models.entities import VocabularyList, VocabularyTerm


@dataclass(slots=True)
class NewTerm:
    term: str
    definition: str
    story: str | None = None


class TermStore:
    """Persistence for vocabulary lists and their terms. Every write commits."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = logging.getLogger(__name__)

    def find_latest_list(self, language: str, domain: str, level: str) -> VocabularyList | None:
        stmt = (
            select(VocabularyList)
            .where(
                VocabularyList.language == language,
                VocabularyList.domain == domain,
                VocabularyList.level == level,
            )
            .order_by(VocabularyList.created_at.desc(), VocabularyList.id.desc())
            .limit(1)
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def create_list(
        self,
        language: str,
        domain: str,
        level: str,
        source_url: str | None = None,
    ) -> VocabularyList:
        vocabulary_list = VocabularyList(language=language, domain=domain, level=level, source_url=source_url)
        self._session.add(vocabulary_list)
        self._session.commit()
        self._session.refresh(vocabulary_list)
        self._logger.info(
            "Created vocabulary list %d for language=%s domain=%s level=%s",
            vocabulary_list.id,
            language,
            domain,
            level,
        )
        return vocabulary_list

    def get_list(self, list_id: int) -> VocabularyList | None:
        return self._session.get(VocabularyList, list_id)

    def list_lists(self) -> list[VocabularyList]:
        stmt = (
            select(VocabularyList)
            .options(selectinload(VocabularyList.terms))
            .order_by(VocabularyList.created_at.desc(), VocabularyList.id.desc())
        )
        return list(self._session.execute(stmt).scalars())

    def find_terms(self, list_id: int) -> list[VocabularyTerm]:
        stmt = select(VocabularyTerm).where(VocabularyTerm.list_id == list_id).order_by(VocabularyTerm.id)
        return list(self._session.execute(stmt).scalars())

    def find_terms_by_language_and_domain(self, language: str, domain: str) -> list[VocabularyTerm]:
        stmt = (
            select(VocabularyList.id)
            .where(VocabularyList.language == language, VocabularyList.domain == domain)
            .order_by(VocabularyList.created_at.desc(), VocabularyList.id.desc())
            .limit(1)
        )
        list_id = self._session.execute(stmt).scalar_one_or_none()
        if list_id is None:
            self._logger.warning("No vocabulary list found for language=%s domain=%s", language, domain)
            return []
        return self.find_terms(list_id)

    def insert_terms(self, list_id: int, terms: Iterable[NewTerm]) -> list[VocabularyTerm]:
        rows = [
            VocabularyTerm(
                list_id=list_id,
                term=item.term,
                definition=item.definition,
                story=item.story,
            )
            for item in terms
        ]
        self._session.add_all(rows)
        self._session.commit()
        for row in rows:
            self._session.refresh(row)
        return rows

    def update_term_story(self, list_id: int, term_text: str, story: str) -> int:
        stmt = (
            update(VocabularyTerm)
            .where(VocabularyTerm.list_id == list_id, VocabularyTerm.term == term_text)
            .values(story=story)
            .execution_options(synchronize_session="fetch")
        )
        result = self._session.execute(stmt)
        self._session.commit()
        return result.rowcount

    def update_term_flag(
        self,
        term_id: int,
        learned: bool | None = None,
        review_later: bool | None = None,
    ) -> VocabularyTerm | None:
        term = self._session.get(VocabularyTerm, term_id)
        if term is None:
            return None
        if learned is not None:
            term.learned = learned
        if review_later is not None:
            term.review_later = review_later
        self._session.commit()
        self._session.refresh(term)
        return term
