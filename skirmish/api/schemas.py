from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

class NewBattleRequest(BaseModel):
    """Battle reset request schema."""
    seed: Optional[int] = None
    layout: Literal["standard", "empty"] = "standard"

class PlaceRequest(BaseModel):
    """Place a bank piece (type + color) or move a placed one (piece_id)."""
    piece_id: Optional[str] = None
    type: Optional[Literal["pawn", "knight", "rook"]] = None
    color: Optional[Literal["white", "black"]] = None
    x: int = Field(ge=0, le=7)
    y: int = Field(ge=0, le=7)

    @model_validator(mode="after")
    def check_source(self) -> "PlaceRequest":
        if self.piece_id is None and (self.type is None or self.color is None):
            raise ValueError("either piece_id or both type and color are required")
        return self

class PieceOut(BaseModel):
    id: str
    type: str
    color: str
    x: int
    y: int
    health: int
    max_health: int

class IndicatorOut(BaseModel):
    id: int
    from_x: int
    from_y: int
    to_x: int
    to_y: int
    color: str

class StateResponse(BaseModel):
    """Battle snapshot schema."""
    phase: str
    turn: str
    tick: int
    winner: Optional[str] = None
    pieces: List[PieceOut]
    board: List[List[Optional[str]]]
    move_indicators: List[IndicatorOut] = Field(default_factory=list)

class EventsResponse(BaseModel):
    """Events response schema."""
    next_offset: int
    events: list[dict]
