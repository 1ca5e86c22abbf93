import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from skirmish.config import Settings
from skirmish.engine.engine import Engine, create_empty_state, create_initial_state
from skirmish.engine.moves import get_valid_moves
from skirmish.engine.model import PIECE_BANK, GameState, Phase, PieceTemplate, Position
from skirmish.runtime.runner import TickRunner
from .schemas import (
    EventsResponse, IndicatorOut, NewBattleRequest, PieceOut, PlaceRequest, StateResponse,
)

settings = Settings.from_env()
logging.basicConfig(level=settings.log_level)
_log = logging.getLogger(__name__)

app = FastAPI(title="Skirmish Board API")
runner: TickRunner | None = None

# Browser front end runs on its own origin (Vite dev server by default)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _make_runner(seed: int, layout: str = "standard") -> TickRunner:
    state = create_initial_state() if layout == "standard" else create_empty_state()
    eng = Engine(seed=seed, initial_state=state)
    return TickRunner(eng, tick_ms=settings.tick_ms, time_compression=settings.time_compression)

def _require_runner() -> TickRunner:
    if not runner:
        raise HTTPException(400, "No battle session")
    return runner

def _require_setup(state: GameState) -> None:
    if state.phase is not Phase.SETUP:
        raise HTTPException(409, f"Setup is closed (phase={state.phase.value})")

def _state_out(s: GameState, r: TickRunner) -> StateResponse:
    return StateResponse(
        phase=s.phase.value,
        turn=s.turn,
        tick=s.tick,
        winner=s.winner,
        pieces=[
            PieceOut(id=p.id, type=p.kind, color=p.color, x=p.position.x, y=p.position.y,
                     health=p.health, max_health=p.max_health)
            for p in s.pieces
        ],
        board=[[cell.id if cell else None for cell in row] for row in s.board],
        move_indicators=[
            IndicatorOut(id=m.id, from_x=m.origin.x, from_y=m.origin.y,
                         to_x=m.destination.x, to_y=m.destination.y, color=m.color)
            for m in r.events.indicators
        ],
    )

@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Skirmish Board API",
        "docs": "/docs",
        "version": "1.0"
    }

@app.on_event("startup")
async def startup():
    """Open a fresh setup session on app startup."""
    global runner
    runner = _make_runner(settings.seed)

@app.on_event("shutdown")
async def shutdown():
    """Stop the tick loop on app shutdown."""
    if runner:
        await runner.stop()

@app.post("/battle/new")
async def new_battle(req: NewBattleRequest):
    """Discard the current session and open a new one in setup phase."""
    await shutdown()
    global runner
    seed = req.seed if req.seed is not None else settings.seed
    runner = _make_runner(seed, req.layout)
    _log.info("New battle session seed=%d layout=%s", seed, req.layout)
    return {"battle_id": "local", "seed": seed}

@app.get("/battle/local/state", response_model=StateResponse)
async def get_state():
    """Get current battle state snapshot."""
    r = _require_runner()
    return _state_out(await r.snapshot(), r)

@app.get("/battle/local/bank")
async def get_bank():
    """Piece templates available for placement during setup."""
    return [{"type": t.kind, "color": t.color, "health": t.health} for t in PIECE_BANK]

@app.post("/battle/local/pieces")
async def place_piece(req: PlaceRequest):
    """Place a bank piece or move a placed one; an occupant of the target is evicted."""
    r = _require_runner()
    s = await r.snapshot()
    _require_setup(s)
    if req.piece_id is not None:
        item = s.find(req.piece_id)
        if item is None:
            raise HTTPException(404, f"Unknown piece {req.piece_id}")
    else:
        item = PieceTemplate(req.type, req.color)
    target = Position(req.x, req.y)
    evts = await r.edit(lambda eng: eng.place(item, target))
    placed = next((e.data["piece_id"] for e in evts if e.kind == "Placed"), None)
    return {"piece_id": placed, "evicted": [e.data["piece_id"] for e in evts if e.kind == "Removed"]}

@app.delete("/battle/local/pieces/{piece_id}")
async def delete_piece(piece_id: str):
    """Remove a placed piece during setup."""
    r = _require_runner()
    s = await r.snapshot()
    _require_setup(s)
    if s.find(piece_id) is None:
        raise HTTPException(404, f"Unknown piece {piece_id}")
    await r.edit(lambda eng: eng.remove(piece_id))
    return {"removed": piece_id}

@app.get("/battle/local/pieces/{piece_id}/moves")
async def get_moves(piece_id: str):
    """Legal destinations of a piece, for move highlighting."""
    r = _require_runner()
    s = await r.snapshot()
    piece = s.find(piece_id)
    if piece is None:
        raise HTTPException(404, f"Unknown piece {piece_id}")
    moves = get_valid_moves(piece, s.board)
    return {"piece_id": piece_id, "moves": [[m.x, m.y] for m in moves]}

@app.post("/battle/local/start")
async def start_battle():
    """Close setup and start ticking."""
    r = _require_runner()
    _require_setup(await r.snapshot())
    await r.start()
    return {"phase": r.engine.phase.value}

@app.post("/battle/local/stop")
async def stop_battle():
    """Stop scheduling ticks."""
    r = _require_runner()
    await r.stop()
    return {"running": r.running}

@app.get("/battle/local/events")
async def get_events(since: int = 0, limit: int = 500):
    """Get events since offset."""
    r = _require_runner()
    evts, next_offset = r.events.since(since, limit)
    return EventsResponse(
        next_offset=next_offset,
        events=[{"kind": e.kind, "tick": e.tick, "data": e.data} for e in evts]
    )

@app.post("/battle/local/time-control")
async def set_time_control(time_compression: float):
    """Set simulation time compression (1.0 = real-time, higher = faster)."""
    r = _require_runner()
    r.set_time_compression(time_compression)
    return {"time_compression": r.time_compression}

@app.get("/battle/local/time-control")
async def get_time_control():
    """Get current time compression setting."""
    r = _require_runner()
    return {"time_compression": r.time_compression}
