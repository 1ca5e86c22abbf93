from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, NamedTuple, Optional, Tuple

Color = Literal["white", "black"]
PieceKind = Literal["pawn", "knight", "rook"]
Winner = Literal["white", "black", "draw"]

BOARD_SIZE = 8
COLORS: Tuple[Color, Color] = ("white", "black")

# Starting health pool per piece type
MAX_HEALTH: Dict[str, int] = {
    "pawn": 2,
    "knight": 4,
    "rook": 6,
}

class Phase(Enum):
    """Session lifecycle: SETUP -> BATTLING -> GAME_OVER, never backwards."""
    SETUP = "setup"
    BATTLING = "battling"
    GAME_OVER = "game_over"

class Position(NamedTuple):
    x: int
    y: int

@dataclass
class Piece:
    id: str
    kind: PieceKind
    color: Color
    position: Position
    health: int

    @property
    def max_health(self) -> int:
        return MAX_HEALTH[self.kind]

@dataclass(frozen=True)
class PieceTemplate:
    """Unlimited-supply bank entry; placing one creates a new Piece."""
    kind: PieceKind
    color: Color

    @property
    def health(self) -> int:
        return MAX_HEALTH[self.kind]

PIECE_BANK: Tuple[PieceTemplate, ...] = (
    PieceTemplate("pawn", "white"),
    PieceTemplate("pawn", "black"),
    PieceTemplate("knight", "white"),
    PieceTemplate("knight", "black"),
    PieceTemplate("rook", "white"),
    PieceTemplate("rook", "black"),
)

# Default layout, mirrored across colors
STANDARD_LAYOUT: Tuple[Tuple[PieceKind, Color, Position], ...] = (
    ("pawn", "white", Position(3, 6)),
    ("pawn", "black", Position(3, 1)),
    ("pawn", "white", Position(4, 6)),
    ("pawn", "black", Position(4, 1)),
    ("knight", "white", Position(1, 7)),
    ("knight", "black", Position(1, 0)),
    ("rook", "white", Position(0, 7)),
    ("rook", "black", Position(0, 0)),
    ("rook", "white", Position(7, 7)),
    ("rook", "black", Position(7, 0)),
)

Board = List[List[Optional[Piece]]]

@dataclass
class Event:
    kind: str
    tick: int
    data: Dict

@dataclass(frozen=True)
class MoveIndicator:
    """Transient arrow from origin to destination, for rendering only."""
    id: int
    origin: Position
    destination: Position
    color: Color

@dataclass
class GameState:
    board: Board
    pieces: List[Piece] = field(default_factory=list)
    turn: Color = "white"
    phase: Phase = Phase.SETUP
    winner: Optional[Winner] = None
    tick: int = 0
    idle_ticks: int = 0
    next_id: int = 1

    @property
    def game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    def find(self, piece_id: str) -> Optional[Piece]:
        for p in self.pieces:
            if p.id == piece_id:
                return p
        return None

    def pieces_of(self, color: Color) -> List[Piece]:
        return [p for p in self.pieces if p.color == color]

def opponent(color: Color) -> Color:
    return "black" if color == "white" else "white"
