from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.db.session import get_session
from app.services.generation import GenerationClient
from app.services.pipeline import EnrichmentPipeline
from app.services.store import TermStore


def generation_client(request: Request) -> GenerationClient:
    return request.app.state.generation_client


def term_store(
    db: Session = Depends(get_session),
) -> TermStore:
    return TermStore(db)


def pipeline(
    store: TermStore = Depends(term_store),
    generator: GenerationClient = Depends(generation_client),
) -> EnrichmentPipeline:
    return EnrichmentPipeline(store, generator)
