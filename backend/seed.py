"""Seed the reference catalog"""
import logging

from sqlalchemy import select

from app.config import get_settings
from app.db.session import Database
from app.models.entities import DifficultyLevel, Language, Vocabulary

logger = logging.getLogger(__name__)

LANGUAGES = [
    ("English", "en"),
    ("Spanish", "es"),
]

DIFFICULTY_LEVELS = [
    ("Beginner", "Basic vocabulary for beginners"),
    ("Intermediate", "More complex vocabulary for intermediate learners"),
    ("Advanced", "Advanced vocabulary for proficient speakers"),
]

VOCABULARY = [
    {
        "word": "Ephemeral",
        "translation": "Efímero",
        "definition": "Lasting for a very short time",
        "example": "The beauty of cherry blossoms is ephemeral, lasting only a few days each spring.",
        "language": "en",
        "difficulty": "Advanced",
    },
    {
        "word": "Ubiquitous",
        "translation": "Ubicuo",
        "definition": "Present, appearing, or found everywhere",
        "example": "Smartphones have become ubiquitous in modern society.",
        "language": "en",
        "difficulty": "Intermediate",
    },
    {
        "word": "Serendipity",
        "translation": "Serendipia",
        "definition": "The occurrence of events by chance in a happy or beneficial way",
        "example": "Finding this rare book was pure serendipity.",
        "language": "en",
        "difficulty": "Advanced",
    },
]


def seed(database: Database) -> None:
    database.create_all()
    session = database.session()
    try:
        languages: dict[str, Language] = {}
        for name, code in LANGUAGES:
            language = session.execute(select(Language).where(Language.code == code)).scalar_one_or_none()
            if language is None:
                language = Language(name=name, code=code)
                session.add(language)
            languages[code] = language

        levels: dict[str, DifficultyLevel] = {}
        for name, description in DIFFICULTY_LEVELS:
            level = session.execute(
                select(DifficultyLevel).where(DifficultyLevel.name == name)
            ).scalar_one_or_none()
            if level is None:
                level = DifficultyLevel(name=name, description=description)
                session.add(level)
            levels[name] = level
        session.flush()

        for item in VOCABULARY:
            exists = session.execute(
                select(Vocabulary.id).where(Vocabulary.word == item["word"])
            ).scalar_one_or_none()
            if exists is not None:
                continue
            session.add(
                Vocabulary(
                    word=item["word"],
                    translation=item["translation"],
                    definition=item["definition"],
                    example=item["example"],
                    language=languages[item["language"]],
                    difficulty=levels[item["difficulty"]],
                )
            )
        session.commit()
    finally:
        session.close()


def main():
    logging.basicConfig(level=logging.INFO)
    database = Database(get_settings().database_url)
    try:
        seed(database)
    finally:
        database.dispose()
    logger.info("Database has been seeded!")


if __name__ == "__main__":
    main()
