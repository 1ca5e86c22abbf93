"""Per-tick battle resolution."""
import copy

from skirmish.engine.engine import (
    STALL_TICKS, advance, create_initial_state, outcome, resolve_tick, start_battle,
)
from skirmish.engine.model import GameState, Phase, Piece, Position
from skirmish.engine.moves import build_board
from skirmish.engine.rng import DRNG


class FirstChoice:
    """Random source that always picks the first candidate."""

    def index(self, n):
        return 0


def make_battle(*pieces, turn="white") -> GameState:
    pieces = list(pieces)
    return GameState(board=build_board(pieces), pieces=pieces, turn=turn,
                     phase=Phase.BATTLING, next_id=len(pieces) + 1)


def piece(pid, kind, color, x, y, health):
    return Piece(pid, kind, color, Position(x, y), health)


def assert_consistent(state: GameState):
    for p in state.pieces:
        assert state.board[p.position.y][p.position.x] is p
        assert p.health > 0
    occupied = [c for row in state.board for c in row if c is not None]
    assert len(occupied) == len(state.pieces)


def test_attack_wounds_adjacent_enemy_without_moving():
    state = make_battle(piece("w1", "pawn", "white", 3, 4, 2), piece("b1", "pawn", "black", 2, 3, 2))
    nxt = advance(state, FirstChoice())
    white, black = nxt.find("w1"), nxt.find("b1")
    assert black.health == 1
    assert white.position == Position(3, 4)
    assert black.position == Position(2, 3)
    assert nxt.turn == "black"
    assert_consistent(nxt)


def test_killing_blow_moves_attacker_onto_target_cell():
    state = make_battle(piece("w1", "pawn", "white", 3, 4, 2), piece("b1", "pawn", "black", 2, 3, 1))
    nxt, evts = resolve_tick(state, FirstChoice())
    assert nxt.find("b1") is None
    assert nxt.find("w1").position == Position(2, 3)
    assert [e.kind for e in evts] == ["Attacked", "Destroyed"]
    assert evts[1].data == {"piece_id": "b1", "killer": "w1"}
    assert_consistent(nxt)


def test_knight_attacks_at_knight_distance():
    state = make_battle(piece("w1", "knight", "white", 4, 4, 4), piece("b1", "rook", "black", 5, 2, 6))
    nxt = advance(state, FirstChoice())
    assert nxt.find("b1").health == 5
    assert nxt.find("w1").position == Position(4, 4)


def test_move_prefers_cells_closer_to_an_enemy():
    state = make_battle(piece("w1", "rook", "white", 0, 7, 6), piece("b1", "rook", "black", 0, 0, 6))
    nxt, evts = resolve_tick(state, FirstChoice())
    # (0,0) is in line of sight but not adjacent, so the rook closes in instead
    assert nxt.find("w1").position == Position(0, 6)
    assert nxt.find("b1").health == 6
    assert evts[0].kind == "Moved"
    assert evts[0].data == {"piece_id": "w1", "color": "white", "from": [0, 7], "to": [0, 6]}


def test_move_falls_back_when_nothing_advances():
    state = make_battle(piece("w1", "pawn", "white", 3, 3, 2), piece("b1", "pawn", "black", 3, 7, 2))
    nxt = advance(state, FirstChoice())
    assert nxt.find("w1").position == Position(3, 2)


def test_only_side_to_move_acts():
    state = make_battle(piece("w1", "pawn", "white", 0, 6, 2), piece("b1", "pawn", "black", 7, 1, 2),
                        turn="black")
    nxt = advance(state, FirstChoice())
    assert nxt.find("w1").position == Position(0, 6)
    assert nxt.find("b1").position == Position(7, 2)
    assert nxt.turn == "white"
    assert nxt.tick == 1


def test_pieces_act_in_list_order():
    # both white pawns can hit the same black pawn; the first one kills it
    state = make_battle(
        piece("w1", "pawn", "white", 3, 4, 2),
        piece("w2", "pawn", "white", 1, 4, 2),
        piece("b1", "pawn", "black", 2, 3, 1),
    )
    nxt = advance(state, FirstChoice())
    assert nxt.find("w1").position == Position(2, 3)
    assert nxt.find("w2").position == Position(1, 3)


def test_advance_does_not_mutate_previous_snapshot():
    state = make_battle(piece("w1", "pawn", "white", 3, 4, 2), piece("b1", "pawn", "black", 2, 3, 1))
    before = copy.deepcopy(state)
    advance(state, FirstChoice())
    assert state == before


def test_white_wins_when_black_is_gone():
    state = make_battle(piece("w1", "rook", "white", 0, 7, 6), turn="black")
    nxt, evts = resolve_tick(state, FirstChoice())
    assert nxt.phase is Phase.GAME_OVER
    assert nxt.winner == "white"
    assert nxt.turn == "black"
    assert nxt.pieces == state.pieces
    assert evts[0].kind == "GameOver"


def test_mutual_elimination_is_a_draw():
    state = make_battle()
    assert outcome(state) == "draw"
    assert advance(state, FirstChoice()).winner == "draw"


def test_advancing_a_finished_game_is_a_no_op():
    over = advance(make_battle(piece("b1", "pawn", "black", 0, 0, 2)), FirstChoice())
    assert over.winner == "black"
    assert advance(over, FirstChoice()) is over


def test_setup_state_does_not_tick():
    state = create_initial_state()
    assert advance(state, FirstChoice()) is state


def test_stalled_battle_ends_in_draw():
    # head-on pawns can neither move nor attack
    state = make_battle(piece("w1", "pawn", "white", 3, 4, 2), piece("b1", "pawn", "black", 3, 3, 2))
    for _ in range(STALL_TICKS):
        state = advance(state, FirstChoice())
        assert state.phase is Phase.BATTLING
    state = advance(state, FirstChoice())
    assert state.phase is Phase.GAME_OVER
    assert state.winner == "draw"


def test_custom_strategy_is_used():
    calls = []

    def hold(p, board, pieces, rng):
        calls.append(p.id)
        return None

    state = make_battle(piece("w1", "rook", "white", 0, 7, 6), piece("w2", "pawn", "white", 4, 6, 2),
                        piece("b1", "rook", "black", 0, 0, 6))
    nxt = advance(state, FirstChoice(), strategy=hold)
    assert calls == ["w1", "w2"]
    assert nxt.idle_ticks == 1
    assert [p.position for p in nxt.pieces] == [p.position for p in state.pieces]


def test_strategy_target_on_enemy_is_an_attack():
    # a ranged pick is still resolved through the attack path
    def snipe(p, board, pieces, rng):
        return Position(0, 0)

    state = make_battle(piece("w1", "rook", "white", 0, 7, 6), piece("b1", "rook", "black", 0, 0, 6))
    nxt = advance(state, FirstChoice(), strategy=snipe)
    assert nxt.find("b1").health == 5
    assert nxt.find("w1").position == Position(0, 7)


def test_battle_from_initial_layout_terminates():
    for seed in (1, 2, 3):
        state = start_battle(create_initial_state())
        rng = DRNG(seed)
        for _ in range(3000):
            prev_turn = state.turn
            state = advance(state, rng)
            assert_consistent(state)
            if state.game_over:
                break
            assert state.turn != prev_turn
        assert state.game_over, f"seed {seed} did not finish"
        assert state.winner in ("white", "black", "draw")


def test_strategy_target_outside_move_rules_is_ignored():
    def teleport(p, board, pieces, rng):
        return Position(7, 0)

    state = make_battle(piece("w1", "pawn", "white", 3, 6, 2), piece("b1", "rook", "black", 7, 0, 6))
    nxt, evts = resolve_tick(state, FirstChoice(), strategy=teleport)
    assert nxt.find("w1").position == Position(3, 6)
    assert nxt.find("b1").health == 6
    assert evts == []
    assert nxt.idle_ticks == 1
    assert_consistent(nxt)
