from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.api.schemas import DifficultyLevelItem, LanguageItem, VocabularyEntryItem
from app.db.session import get_session
from app.models.entities import DifficultyLevel, Language, Vocabulary

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get(
    "/languages",
    response_model=list[LanguageItem],
)
def list_languages(
    db: Session = Depends(get_session),
):
    results = db.execute(select(Language).order_by(Language.id)).scalars().all()
    return [_language_to_schema(language) for language in results]


@router.get(
    "/difficulty-levels",
    response_model=list[DifficultyLevelItem],
)
def list_difficulty_levels(
    db: Session = Depends(get_session),
):
    results = db.execute(select(DifficultyLevel).order_by(DifficultyLevel.id)).scalars().all()
    return [_difficulty_to_schema(level) for level in results]


@router.get(
    "/vocabulary",
    response_model=list[VocabularyEntryItem],
)
def list_vocabulary(
    language_id: int | None = Query(default=None, alias="languageId"),
    difficulty_id: int | None = Query(default=None, alias="difficultyId"),
    db: Session = Depends(get_session),
):
    stmt = select(Vocabulary).options(
        selectinload(Vocabulary.language),
        selectinload(Vocabulary.difficulty),
    )
    if language_id is not None:
        stmt = stmt.where(Vocabulary.language_id == language_id)
    if difficulty_id is not None:
        stmt = stmt.where(Vocabulary.difficulty_id == difficulty_id)
    stmt = stmt.order_by(Vocabulary.created_at.desc(), Vocabulary.id.desc())
    results = db.execute(stmt).scalars().all()
    return [_vocabulary_to_schema(entry) for entry in results]


@router.get(
    "/vocabulary/{vocabulary_id}",
    response_model=VocabularyEntryItem,
)
def get_vocabulary(
    vocabulary_id: int,
    db: Session = Depends(get_session),
):
    stmt = select(Vocabulary).where(Vocabulary.id == vocabulary_id).options(
        selectinload(Vocabulary.language),
        selectinload(Vocabulary.difficulty),
    )
    result = db.execute(stmt).scalar_one_or_none()
    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vocabulary not found")
    return _vocabulary_to_schema(result)


def _language_to_schema(language: Language) -> LanguageItem:
    return LanguageItem(
        id=language.id,
        name=language.name,
        code=language.code,
        created_at=language.created_at,
        updated_at=language.updated_at,
    )


def _difficulty_to_schema(level: DifficultyLevel) -> DifficultyLevelItem:
    return DifficultyLevelItem(
        id=level.id,
        name=level.name,
        description=level.description,
        created_at=level.created_at,
        updated_at=level.updated_at,
    )


def _vocabulary_to_schema(entry: Vocabulary) -> VocabularyEntryItem:
    return VocabularyEntryItem(
        id=entry.id,
        word=entry.word,
        translation=entry.translation,
        definition=entry.definition,
        example=entry.example,
        language_id=entry.language_id,
        difficulty_id=entry.difficulty_id,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
        language=_language_to_schema(entry.language),
        difficulty=_difficulty_to_schema(entry.difficulty),
    )
