from datetime import datetime
from typing import Literal, Sequence

from pydantic import BaseModel, Field, HttpUrl

LanguageCode = Literal["en", "de", "es", "fr", "it", "pt"]
LevelCode = Literal["A1", "A2", "B1", "B2", "C1", "C2"]


class LanguageItem(BaseModel):
    id: int
    name: str
    code: str
    created_at: datetime
    updated_at: datetime


class DifficultyLevelItem(BaseModel):
    id: int
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class VocabularyEntryItem(BaseModel):
    id: int
    word: str
    translation: str
    definition: str
    example: str | None = None
    language_id: int
    difficulty_id: int
    created_at: datetime
    updated_at: datetime
    language: LanguageItem
    difficulty: DifficultyLevelItem


class GenerateListRequest(BaseModel):
    language: LanguageCode
    domain: str = Field(min_length=1, max_length=128)
    level: LevelCode
    source_url: HttpUrl | None = None


class TermItem(BaseModel):
    id: int
    list_id: int
    term: str
    definition: str
    story: str | None = None
    learned: bool
    review_later: bool
    created_at: datetime


class TermFlagsUpdate(BaseModel):
    learned: bool | None = None
    review_later: bool | None = None


class ProgressItem(BaseModel):
    learned: int
    total: int
    percentage: int


class VocabularyListItem(BaseModel):
    id: int
    language: str
    domain: str
    level: str
    source_url: str | None = None
    created_at: datetime
    progress: ProgressItem
    terms: Sequence[TermItem]


class VocabularyListSummary(BaseModel):
    id: int
    language: str
    domain: str
    level: str
    created_at: datetime
    term_count: int
