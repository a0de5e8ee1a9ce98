from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Protocol, TypeVar


class TermFilter(str, Enum):
    ALL = "all"
    LEARNED = "learned"
    UNLEARNED = "unlearned"
    REVIEW = "review"


class Flagged(Protocol):
    learned: bool
    review_later: bool


FlaggedT = TypeVar("FlaggedT", bound=Flagged)


@dataclass(slots=True)
class Card:
    id: int
    term: str
    definition: str
    story: str | None = None
    learned: bool = False
    review_later: bool = False


@dataclass(slots=True, frozen=True)
class Progress:
    learned: int
    total: int

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        # Halves round up.
        return (self.learned * 200 + self.total) // (self.total * 2)


def matches_filter(card: Flagged, mode: TermFilter) -> bool:
    if mode is TermFilter.LEARNED:
        return bool(card.learned)
    if mode is TermFilter.UNLEARNED:
        return not card.learned
    if mode is TermFilter.REVIEW:
        return bool(card.review_later)
    return True


def filter_terms(terms: Sequence[FlaggedT], mode: TermFilter | str = TermFilter.ALL) -> list[FlaggedT]:
    mode = TermFilter(mode)
    return [term for term in terms if matches_filter(term, mode)]


FlagUpdate = Callable[..., object]


@dataclass
class CardView:
    """
    One-card-at-a-time view over a term list.

    Holds only local view state. Flag toggles change the local card first and
    then forward the change through ``on_update(term_id, learned=..., review_later=...)``.
    """

    cards: list[Card]
    on_update: FlagUpdate | None = None
    mode: TermFilter = TermFilter.ALL
    index: int = 0
    _visible: list[Card] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._refresh()

    def _refresh(self) -> None:
        self._visible = filter_terms(self.cards, self.mode)
        if self.index >= len(self._visible):
            self.index = max(len(self._visible) - 1, 0)

    @property
    def visible(self) -> list[Card]:
        return list(self._visible)

    @property
    def current(self) -> Card | None:
        if not self._visible:
            return None
        return self._visible[self.index]

    def set_filter(self, mode: TermFilter | str) -> None:
        self.mode = TermFilter(mode)
        self.index = 0
        self._refresh()

    def next(self) -> Card | None:
        if self.index < len(self._visible) - 1:
            self.index += 1
        return self.current

    def previous(self) -> Card | None:
        if self.index > 0:
            self.index -= 1
        return self.current

    def _apply(self, card_id: int, **changes: bool) -> Card | None:
        for position, card in enumerate(self.cards):
            if card.id != card_id:
                continue
            updated = replace(card, **changes)
            self.cards[position] = updated
            current = self.current
            self._refresh()
            # Keep the user on the same card when it is still visible after the change.
            if current is not None and current.id == card_id and updated in self._visible:
                self.index = self._visible.index(updated)
            if self.on_update is not None:
                self.on_update(card_id, **changes)
            return updated
        return None

    def toggle_learned(self, card_id: int) -> Card | None:
        card = next((item for item in self.cards if item.id == card_id), None)
        if card is None:
            return None
        return self._apply(card_id, learned=not card.learned)

    def toggle_review_later(self, card_id: int) -> Card | None:
        card = next((item for item in self.cards if item.id == card_id), None)
        if card is None:
            return None
        return self._apply(card_id, review_later=not card.review_later)

    def progress(self) -> Progress:
        return Progress(learned=sum(1 for card in self.cards if card.learned), total=len(self.cards))
