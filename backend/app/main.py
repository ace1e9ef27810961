import io
import logging
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from rearranger import EquationSession, Operation, config, engine
from rearranger.graph import build_figure
from rearranger.logging_config import setup_logging
from rearranger.model import equation_to_dict, new_id
from rearranger.symbolic import to_latex

settings = config.get_settings()
setup_logging(settings["log_level"])
logger = logging.getLogger("rearranger.backend")

app = FastAPI(title="Rearranger API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# In-memory only; sessions do not survive a restart.
_sessions: dict[str, EquationSession] = {}


class EquationRequest(BaseModel):
    equation: Optional[str] = None


class OperationRequest(BaseModel):
    type: Literal["add", "subtract", "multiply", "divide"]
    value: str
    side: Literal["both", "left", "right"] = "both"


class MoveRequest(BaseModel):
    term_ids: list[str]
    from_side: Literal["left", "right"]
    to_side: Literal["left", "right"]


class SelectRequest(BaseModel):
    item_id: str
    multi: bool = False


class ExpandRequest(BaseModel):
    group_id: str


class HistoryEntry(BaseModel):
    description: str
    text: str
    operation: Optional[dict] = None


class ParseResponse(BaseModel):
    text: str
    latex: str
    equation: dict


class SessionResponse(BaseModel):
    id: str
    text: str
    latex: str
    equation: dict
    history: list[HistoryEntry] = Field(default_factory=list)
    current_index: int
    can_undo: bool
    can_redo: bool


def _get_session(session_id: str) -> EquationSession:
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    return session


def _respond(session_id: str) -> dict:
    return {"id": session_id, **_sessions[session_id].snapshot()}


def _run(action):
    """Call *action*, turning bad input into 400 like ``/api/solve`` did."""
    try:
        return action()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/parse", response_model=ParseResponse)
def parse(req: EquationRequest):
    text = (req.equation or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Equation cannot be empty.")
    equation = _run(lambda: engine.parse_equation(text, settings["strict_terms"]))
    return {
        "text": engine.serialize(equation),
        "latex": to_latex(equation),
        "equation": equation_to_dict(equation),
    }


@app.post("/api/sessions", response_model=SessionResponse, status_code=201)
def create_session(req: EquationRequest):
    text = req.equation.strip() if req.equation else None
    session = _run(lambda: EquationSession(text, settings))
    session_id = new_id()
    _sessions[session_id] = session
    logger.info("Created session %s", session_id)
    return _respond(session_id)


@app.get("/api/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str):
    _get_session(session_id)
    return _respond(session_id)


@app.delete("/api/sessions/{session_id}", status_code=204)
def delete_session(session_id: str):
    _get_session(session_id)
    del _sessions[session_id]
    return Response(status_code=204)


@app.post("/api/sessions/{session_id}/load", response_model=SessionResponse)
def load_equation(session_id: str, req: EquationRequest):
    session = _get_session(session_id)
    text = (req.equation or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Equation cannot be empty.")
    _run(lambda: session.load(text))
    return _respond(session_id)


@app.post("/api/sessions/{session_id}/operations", response_model=SessionResponse)
def apply_operation(session_id: str, req: OperationRequest):
    session = _get_session(session_id)
    _run(lambda: session.apply(Operation(req.type, req.value, req.side)))
    return _respond(session_id)


@app.post("/api/sessions/{session_id}/moves", response_model=SessionResponse)
def move_terms(session_id: str, req: MoveRequest):
    session = _get_session(session_id)
    session.move(req.term_ids, req.from_side, req.to_side)
    return _respond(session_id)


@app.post("/api/sessions/{session_id}/select", response_model=SessionResponse)
def select_item(session_id: str, req: SelectRequest):
    session = _get_session(session_id)
    try:
        session.select(req.item_id, req.multi)
    except KeyError:
        raise HTTPException(status_code=404, detail="Term not found.")
    return _respond(session_id)


@app.post("/api/sessions/{session_id}/expand", response_model=SessionResponse)
def toggle_group(session_id: str, req: ExpandRequest):
    session = _get_session(session_id)
    try:
        session.toggle_expanded(req.group_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Group not found.")
    return _respond(session_id)


@app.post("/api/sessions/{session_id}/undo", response_model=SessionResponse)
def undo(session_id: str):
    _get_session(session_id).undo()
    return _respond(session_id)


@app.post("/api/sessions/{session_id}/redo", response_model=SessionResponse)
def redo(session_id: str):
    _get_session(session_id).redo()
    return _respond(session_id)


@app.get("/api/sessions/{session_id}/graph")
def graph(session_id: str):
    session = _get_session(session_id)
    fig = build_figure(session.equation, title=session.text)
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=100, facecolor=fig.get_facecolor())
    return Response(content=buf.getvalue(), media_type="image/png")
