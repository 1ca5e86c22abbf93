import logging
from dataclasses import replace
from typing import List, Optional, Tuple, Union

from .model import (
    COLORS, MAX_HEALTH, STANDARD_LAYOUT, Event, GameState, Phase, Piece,
    PieceTemplate, Position, Winner, opponent,
)
from .moves import build_board, get_valid_moves, require_on_board
from .rng import DRNG, RandomSource
from .strategy import Strategy, greedy

_log = logging.getLogger(__name__)

# Consecutive ticks without any action after which the battle is a draw
STALL_TICKS = 2

def _piece_id(kind: str, color: str, n: int) -> str:
    return f"{color[0]}-{kind}-{n}"

def _with_pieces(state: GameState, pieces: List[Piece], **changes) -> GameState:
    """New snapshot sharing nothing mutable with state."""
    return replace(state, board=build_board(pieces), pieces=pieces, **changes)

def _copy_pieces(state: GameState) -> List[Piece]:
    return [replace(p) for p in state.pieces]

def create_empty_state() -> GameState:
    """Empty board in setup phase, white to move."""
    return GameState(board=build_board([]))

def create_initial_state() -> GameState:
    """Standard two-sided layout in setup phase, white to move."""
    pieces = []
    for n, (kind, color, pos) in enumerate(STANDARD_LAYOUT, start=1):
        pieces.append(Piece(_piece_id(kind, color, n), kind, color, pos, MAX_HEALTH[kind]))
    return GameState(board=build_board(pieces), pieces=pieces, next_id=len(pieces) + 1)

def place_piece(state: GameState, item: Union[Piece, PieceTemplate], target: Position) -> GameState:
    """Put a placed piece or a bank template on target, evicting any occupant.

    A Piece already in state is relocated; anything else creates a new piece
    at full health. Only allowed during setup, otherwise state is returned.
    """
    if state.phase is not Phase.SETUP:
        _log.warning("Ignoring placement after setup (phase=%s)", state.phase.value)
        return state
    target = Position(*target)
    require_on_board(target)

    moving_id = item.id if isinstance(item, Piece) and state.find(item.id) else None
    pieces = [p for p in _copy_pieces(state) if p.position != target or p.id == moving_id]
    next_id = state.next_id
    if moving_id is not None:
        for p in pieces:
            if p.id == moving_id:
                p.position = target
    else:
        pieces.append(Piece(_piece_id(item.kind, item.color, next_id), item.kind, item.color,
                            target, MAX_HEALTH[item.kind]))
        next_id += 1
    return _with_pieces(state, pieces, next_id=next_id)

def remove_piece(state: GameState, item: Union[Piece, PieceTemplate]) -> GameState:
    """Delete a placed piece. Templates and unknown pieces are a no-op."""
    if state.phase is not Phase.SETUP:
        _log.warning("Ignoring removal after setup (phase=%s)", state.phase.value)
        return state
    if not isinstance(item, Piece) or state.find(item.id) is None:
        return state
    pieces = [p for p in _copy_pieces(state) if p.id != item.id]
    return _with_pieces(state, pieces)

def start_battle(state: GameState) -> GameState:
    """SETUP -> BATTLING. Any other phase is left alone."""
    if state.phase is not Phase.SETUP:
        return state
    return replace(state, phase=Phase.BATTLING)

def outcome(state: GameState) -> Optional[Winner]:
    """Winner of the position if the battle is decided, else None."""
    white, black = (len(state.pieces_of(c)) for c in COLORS)
    if white == 0 and black == 0:
        return "draw"
    if white == 0:
        return "black"
    if black == 0:
        return "white"
    if state.idle_ticks >= STALL_TICKS:
        return "draw"
    return None

def resolve_tick(state: GameState, rng: RandomSource,
                 strategy: Strategy = greedy) -> Tuple[GameState, List[Event]]:
    """Run one tick for the side to move and return (new_state, events)."""
    if state.phase is not Phase.BATTLING:
        return state, []

    result = outcome(state)
    if result is not None:
        _log.info("Battle over after %d ticks: %s", state.tick, result)
        return (replace(state, phase=Phase.GAME_OVER, winner=result),
                [Event("GameOver", state.tick, {"winner": result})])

    evts: List[Event] = []
    pieces = _copy_pieces(state)
    board = build_board(pieces)
    acted = False

    for piece in [p for p in pieces if p.color == state.turn]:
        origin = piece.position
        if board[origin.y][origin.x] is not piece:
            continue
        target = strategy(piece, board, pieces, rng)
        if target is None or target == origin:
            continue
        if target not in get_valid_moves(piece, board):
            _log.warning("Strategy chose illegal cell %s for %s, skipping", tuple(target), piece.id)
            continue
        occupant = board[target.y][target.x]

        if occupant is None:
            board[origin.y][origin.x] = None
            piece.position = target
            board[target.y][target.x] = piece
            evts.append(Event("Moved", state.tick,
                              {"piece_id": piece.id, "color": piece.color,
                               "from": list(origin), "to": list(target)}))
        else:
            occupant.health -= 1
            evts.append(Event("Attacked", state.tick,
                              {"attacker": piece.id, "target": occupant.id,
                               "from": list(origin), "at": list(target), "hp": occupant.health}))
            if occupant.health <= 0:
                pieces = [p for p in pieces if p is not occupant]
                board[origin.y][origin.x] = None
                piece.position = target
                board[target.y][target.x] = piece
                evts.append(Event("Destroyed", state.tick,
                                  {"piece_id": occupant.id, "killer": piece.id}))
        acted = True

    _log.debug("Tick %d (%s): %d events", state.tick, state.turn, len(evts))
    new_state = _with_pieces(
        state, pieces,
        turn=opponent(state.turn),
        tick=state.tick + 1,
        idle_ticks=0 if acted else state.idle_ticks + 1,
    )
    return new_state, evts

def advance(state: GameState, rng: RandomSource, strategy: Strategy = greedy) -> GameState:
    """Tick transition without the event stream."""
    return resolve_tick(state, rng, strategy)[0]

class Engine:
    """Stateful session around the pure transitions, seeded for replay."""

    def __init__(self, seed: int, initial_state: Optional[GameState] = None,
                 strategy: Strategy = greedy, rng: Optional[RandomSource] = None):
        self.state = initial_state if initial_state is not None else create_initial_state()
        self._rng = rng if rng is not None else DRNG(seed)
        self._strategy = strategy

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def game_over(self) -> bool:
        return self.state.game_over

    def place(self, item: Union[Piece, PieceTemplate], target: Position) -> List[Event]:
        """Place a bank template or relocate a placed piece."""
        if self.state.phase is not Phase.SETUP:
            return []
        before = {p.id for p in self.state.pieces}
        self.state = place_piece(self.state, item, target)
        after = {p.id for p in self.state.pieces}
        evts = [Event("Removed", self.state.tick, {"piece_id": pid}) for pid in sorted(before - after)]
        placed = item.id if isinstance(item, Piece) and item.id in after else None
        if placed is None and after - before:
            placed = next(iter(after - before))
        if placed is not None:
            evts.append(Event("Placed", self.state.tick,
                              {"piece_id": placed, "at": list(Position(*target))}))
        return evts

    def remove(self, piece_id: str) -> List[Event]:
        piece = self.state.find(piece_id)
        if piece is None:
            return []
        self.state = remove_piece(self.state, piece)
        if self.state.find(piece_id) is not None:
            return []
        return [Event("Removed", self.state.tick, {"piece_id": piece_id})]

    def start(self) -> List[Event]:
        if self.state.phase is not Phase.SETUP:
            return []
        self.state = start_battle(self.state)
        _log.info("Battle started with %d pieces", len(self.state.pieces))
        return [Event("BattleStarted", self.state.tick, {"pieces": len(self.state.pieces)})]

    def step(self) -> List[Event]:
        """Advance the battle by one tick."""
        self.state, evts = resolve_tick(self.state, self._rng, self._strategy)
        return evts

    def valid_moves(self, piece_id: str) -> Optional[List[Position]]:
        piece = self.state.find(piece_id)
        if piece is None:
            return None
        return get_valid_moves(piece, self.state.board)

    def snapshot(self) -> GameState:
        """Return current state."""
        return self.state
