from typing import Callable, List, Optional, Sequence

from .model import Board, Piece, Position
from .moves import get_valid_moves, is_adjacent, manhattan
from .rng import RandomSource, pick

# (piece, board, pieces, rng) -> target cell, or None to stay put.
# An enemy-occupied target is resolved as an attack, an empty one as a move.
Strategy = Callable[[Piece, Board, Sequence[Piece], RandomSource], Optional[Position]]

def _advances(piece: Piece, dest: Position, enemies: Sequence[Piece]) -> bool:
    """True if dest is strictly closer to at least one enemy."""
    for e in enemies:
        if manhattan(dest, e.position) < manhattan(piece.position, e.position):
            return True
    return False

def greedy(piece: Piece, board: Board, pieces: Sequence[Piece], rng: RandomSource) -> Optional[Position]:
    """Attack an adjacent enemy if possible, otherwise close in on the enemy."""
    moves = get_valid_moves(piece, board)
    if not moves:
        return None

    attacks: List[Position] = []
    free: List[Position] = []
    for m in moves:
        occupant = board[m.y][m.x]
        if occupant is None:
            free.append(m)
        elif occupant.color != piece.color and is_adjacent(piece.position, m):
            attacks.append(m)
    if attacks:
        return pick(rng, attacks)

    if not free:
        return None
    enemies = [p for p in pieces if p.color != piece.color]
    closer = [m for m in free if _advances(piece, m, enemies)]
    return pick(rng, closer or free)
