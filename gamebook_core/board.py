from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

TicketType = str  # 'polaroid', 'postcard', 'ticket', 'minimal', 'widget'
Cell = Tuple[int, int]  # (col, row)

DEFAULT_BOARD_COLUMNS = 4

TICKET_TYPES: Tuple[TicketType, ...] = ('polaroid', 'postcard', 'ticket', 'minimal', 'widget')
MOUNT_STYLES: Tuple[str, ...] = ('tape', 'color-pin', 'metal-pin')
POSTCARD_SIDES: Tuple[str, ...] = ('front', 'back')
STATUSES: Tuple[str, ...] = ('playing', 'backlog', 'finished', 'dropped')

DEFAULT_TICKET_TYPE: TicketType = 'polaroid'
DEFAULT_MOUNT_STYLE = 'tape'
DEFAULT_POSTCARD_SIDE = 'front'

# Natural (w, h) of each ticket type before any resizing.
BASE_SPANS: Dict[TicketType, Tuple[int, int]] = {
    'polaroid': (1, 2),
    'postcard': (2, 1),
    'ticket': (2, 1),
    'minimal': (1, 1),
    'widget': (1, 1),
}
LANDSCAPE_PREFERRED = frozenset({'postcard', 'ticket'})
SQUARE_BIASED = frozenset({'widget'})

_GLYPHS: Dict[TicketType, str] = {
    'polaroid': 'P',
    'postcard': 'C',
    'ticket': 'T',
    'minimal': 'M',
    'widget': 'W',
}


@dataclass(frozen=True)
class Span:
    w: int
    h: int

    @property
    def area(self) -> int:
        return self.w * self.h


@dataclass(frozen=True)
class GridCell:
    x: int
    y: int


@dataclass(frozen=True)
class GridRect:
    """A rectangle in grid cells, not yet bound to a column count."""
    x: int
    y: int
    w: int
    h: int

    def cells(self) -> Iterable[Cell]:
        """Iterates the covered cells row by row, left to right."""
        for row in range(self.y, self.y + self.h):
            for col in range(self.x, self.x + self.w):
                yield (col, row)

    def overlap_area(self, other: 'GridRect') -> int:
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.x + self.w, other.x + other.w)
        bottom = min(self.y + self.h, other.y + other.h)
        if right <= left or bottom <= top:
            return 0
        return (right - left) * (bottom - top)

    def center_distance(self, other: 'GridRect') -> float:
        """Manhattan distance between the two rectangle centers."""
        return (abs(self.x + self.w / 2 - (other.x + other.w / 2))
                + abs(self.y + self.h / 2 - (other.y + other.h / 2)))


@dataclass(frozen=True)
class BoardPlacement:
    """Concrete placement of a card, computed against a given column count."""
    x: int
    y: int
    w: int
    h: int
    columns: int

    @property
    def span(self) -> Span:
        return Span(self.w, self.h)

    def rect(self) -> GridRect:
        return GridRect(self.x, self.y, self.w, self.h)


@dataclass(frozen=True)
class GameNote:
    id: str
    timestamp: float
    where_left_off: str
    quick_thought: Optional[str] = None
    progress: Optional[float] = None


@dataclass(frozen=True)
class Card:
    """A tracked game pinned to the board."""
    id: str
    title: str
    status: str = 'playing'
    notes: Tuple[GameNote, ...] = field(default_factory=tuple)
    ticket_type: TicketType = DEFAULT_TICKET_TYPE
    mount_style: str = DEFAULT_MOUNT_STYLE
    postcard_side: str = DEFAULT_POSTCARD_SIDE
    board: Optional[BoardPlacement] = None
    last_note: Optional[GameNote] = None
    image_uri: Optional[str] = None
    playtime: Optional[str] = None
    progress: Optional[float] = None


def find_card(cards: Iterable[Card], card_id: str) -> Optional[Card]:
    for card in cards:
        if card.id == card_id:
            return card
    return None


def render_board(cards: Iterable[Card], columns: int) -> str:
    """Renders placed cards as a text grid, one glyph per ticket type and '.' for free cells."""
    cells: Dict[Cell, str] = {}
    rows = 0
    for card in cards:
        if card.board is None:
            continue
        glyph = _GLYPHS.get(card.ticket_type, '?')
        for cell in card.board.rect().cells():
            cells[cell] = glyph
        rows = max(rows, card.board.y + card.board.h)
    lines: List[str] = []
    for row in range(rows):
        lines.append(' '.join(cells.get((col, row), '.') for col in range(max(1, columns))))
    return '\n'.join(lines)
