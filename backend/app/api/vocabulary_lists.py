from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.schemas import (
    GenerateListRequest,
    ProgressItem,
    TermFlagsUpdate,
    TermItem,
    VocabularyListItem,
    VocabularyListSummary,
)
from app.dependencies import pipeline, term_store
from app.models.entities import VocabularyList, VocabularyTerm
from app.services.cards import Progress, TermFilter, filter_terms
from app.services.pipeline import EnrichmentPipeline
from app.services.store import TermStore

router = APIRouter(prefix="/api", tags=["vocabulary-lists"])


@router.post(
    "/vocabulary-lists",
    response_model=VocabularyListItem,
)
def generate_list(
    payload: GenerateListRequest,
    enrichment: EnrichmentPipeline = Depends(pipeline),
):
    result = enrichment.ensure_terms(
        payload.language,
        payload.domain.strip(),
        payload.level,
        source_url=str(payload.source_url) if payload.source_url else None,
    )
    return _list_to_schema(result.vocabulary_list, result.terms)


@router.get(
    "/vocabulary-lists",
    response_model=list[VocabularyListSummary],
)
def list_vocabulary_lists(
    store: TermStore = Depends(term_store),
):
    return [
        VocabularyListSummary(
            id=vocabulary_list.id,
            language=vocabulary_list.language,
            domain=vocabulary_list.domain,
            level=vocabulary_list.level,
            created_at=vocabulary_list.created_at,
            term_count=len(vocabulary_list.terms),
        )
        for vocabulary_list in store.list_lists()
    ]


@router.get(
    "/vocabulary-lists/{list_id}",
    response_model=VocabularyListItem,
)
def get_vocabulary_list(
    list_id: int,
    term_filter: TermFilter = Query(default=TermFilter.ALL, alias="filter"),
    store: TermStore = Depends(term_store),
):
    vocabulary_list = store.get_list(list_id)
    if vocabulary_list is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vocabulary list not found")
    terms = store.find_terms(list_id)
    return _list_to_schema(vocabulary_list, terms, term_filter)


@router.get(
    "/vocabulary-terms",
    response_model=list[TermItem],
)
def find_terms(
    language: str,
    domain: str,
    store: TermStore = Depends(term_store),
):
    return [_term_to_schema(term) for term in store.find_terms_by_language_and_domain(language, domain)]


@router.patch(
    "/vocabulary-terms/{term_id}",
    response_model=TermItem,
)
def update_term(
    term_id: int,
    payload: TermFlagsUpdate,
    store: TermStore = Depends(term_store),
):
    if payload.learned is None and payload.review_later is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Provide 'learned' and/or 'review_later'.",
        )
    term = store.update_term_flag(term_id, learned=payload.learned, review_later=payload.review_later)
    if term is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vocabulary term not found")
    return _term_to_schema(term)


def _term_to_schema(term: VocabularyTerm) -> TermItem:
    return TermItem(
        id=term.id,
        list_id=term.list_id,
        term=term.term,
        definition=term.definition,
        story=term.story,
        learned=term.learned,
        review_later=term.review_later,
        created_at=term.created_at,
    )


def _list_to_schema(
    vocabulary_list: VocabularyList,
    terms: list[VocabularyTerm],
    term_filter: TermFilter = TermFilter.ALL,
) -> VocabularyListItem:
    progress = Progress(learned=sum(1 for term in terms if term.learned), total=len(terms))
    return VocabularyListItem(
        id=vocabulary_list.id,
        language=vocabulary_list.language,
        domain=vocabulary_list.domain,
        level=vocabulary_list.level,
        source_url=vocabulary_list.source_url,
        created_at=vocabulary_list.created_at,
        progress=ProgressItem(learned=progress.learned, total=progress.total, percentage=progress.percentage),
        terms=[_term_to_schema(term) for term in filter_terms(terms, term_filter)],
    )
