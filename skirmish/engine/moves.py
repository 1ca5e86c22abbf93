from typing import Iterable, List, Tuple

from .model import BOARD_SIZE, Board, Piece, Position

KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-2, -1), (-2, 1), (-1, -2), (-1, 2),
    (1, -2), (1, 2), (2, -1), (2, 1),
)
ROOK_DIRS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))

class BoardError(ValueError):
    """A position outside the 8x8 grid was handed to the rules."""

def on_board(x: int, y: int) -> bool:
    return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE

def require_on_board(pos: Position) -> None:
    if not on_board(pos.x, pos.y):
        raise BoardError(f"position {tuple(pos)} is off the board")

def manhattan(a: Position, b: Position) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)

def is_adjacent(a: Position, b: Position) -> bool:
    """Touching cells (king step) or a knight's jump apart."""
    dx = abs(a.x - b.x)
    dy = abs(a.y - b.y)
    return (dx <= 1 and dy <= 1) or (dx, dy) in ((2, 1), (1, 2))

def build_board(pieces: Iterable[Piece]) -> Board:
    """Rebuild the occupancy grid (board[y][x]) from a piece list."""
    board: Board = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    for p in pieces:
        require_on_board(p.position)
        board[p.position.y][p.position.x] = p
    return board

def _pawn_moves(piece: Piece, board: Board) -> List[Position]:
    x, y = piece.position
    ny = y - 1 if piece.color == "white" else y + 1
    if not on_board(x, ny):
        return []
    moves: List[Position] = []
    if board[ny][x] is None:
        moves.append(Position(x, ny))
    # Diagonal steps only when they capture
    for nx in (x - 1, x + 1):
        if on_board(nx, ny):
            other = board[ny][nx]
            if other is not None and other.color != piece.color:
                moves.append(Position(nx, ny))
    return moves

def _knight_moves(piece: Piece, board: Board) -> List[Position]:
    x, y = piece.position
    moves: List[Position] = []
    for dx, dy in KNIGHT_OFFSETS:
        nx, ny = x + dx, y + dy
        if not on_board(nx, ny):
            continue
        other = board[ny][nx]
        if other is None or other.color != piece.color:
            moves.append(Position(nx, ny))
    return moves

def _rook_moves(piece: Piece, board: Board) -> List[Position]:
    x, y = piece.position
    moves: List[Position] = []
    for dx, dy in ROOK_DIRS:
        nx, ny = x + dx, y + dy
        while on_board(nx, ny):
            other = board[ny][nx]
            if other is None:
                moves.append(Position(nx, ny))
            else:
                if other.color != piece.color:
                    moves.append(Position(nx, ny))
                break
            nx += dx
            ny += dy
    return moves

_MOVE_RULES = {
    "pawn": _pawn_moves,
    "knight": _knight_moves,
    "rook": _rook_moves,
}

def get_valid_moves(piece: Piece, board: Board) -> List[Position]:
    """Return every legal destination for piece on board.

    Destinations may be empty cells or cells holding an enemy; friendly
    cells and off-board cells are never returned. The board is not modified.
    """
    require_on_board(piece.position)
    return _MOVE_RULES[piece.kind](piece, board)
