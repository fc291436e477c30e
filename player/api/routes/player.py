# player/api/routes/player.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from player.engine import PlayerContext, ROOT_SCOPE_ID, get_player
from player.engine.actions.scope import Scope

router = APIRouter(prefix="/api/player", tags=["player"])


# ---------- DTO -------------------------------------------------------------

class ScopeDTO(BaseModel):
    scope_id: Optional[str] = None
    parent: str = ROOT_SCOPE_ID
    functions: Dict[str, Any] = {}
    state: Dict[str, Any] = {}


class InvokeDTO(BaseModel):
    scope: str = ROOT_SCOPE_ID
    name: str


class DispatchDTO(BaseModel):
    scope: str = ROOT_SCOPE_ID
    event: str
    widget: Dict[str, Any] = {}


class ConditionDTO(BaseModel):
    scope: str = ROOT_SCOPE_ID
    conditions: Any = None


# ---------- helpers ---------------------------------------------------------

def _player() -> PlayerContext:
    try:
        return get_player()
    except RuntimeError:
        raise HTTPException(500, "Player is not initialized")


def _scope(ctx: PlayerContext, scope_id: str) -> Scope:
    scope = ctx.scope(scope_id)
    if scope is None:
        raise HTTPException(404, f"scope '{scope_id}' not found")
    return scope


def _scope_to_dict(scope: Scope) -> Dict[str, Any]:
    parent = scope.parent
    return {
        "id": scope.id,
        "parent": parent.id if parent is not None else None,
        "functions": sorted(scope.functions.keys()),
        "state": scope.state,
    }


# ---------- routes ----------------------------------------------------------

@router.get("/status")
def status() -> Dict[str, Any]:
    ctx = _player()
    return {
        "ready": ctx.ready,
        "question": ctx.question.id if ctx.question else None,
        "error": str(ctx.last_error) if ctx.last_error else None,
        "actions": sorted(ctx.actions.keys()),
        "commands": sorted(ctx.commands.keys()),
    }


@router.get("/scopes")
def list_scopes() -> List[Dict[str, Any]]:
    ctx = _player()
    return [_scope_to_dict(s) for s in ctx.root.walk()]


@router.post("/scopes")
def create_scope(body: ScopeDTO) -> Dict[str, Any]:
    ctx = _player()
    try:
        scope = ctx.new_scope(
            body.parent,
            scope_id=body.scope_id,
            functions=body.functions,
            state=body.state,
        )
    except KeyError as e:
        raise HTTPException(404, str(e.args[0]))
    except ValueError as e:
        raise HTTPException(409, str(e))
    return _scope_to_dict(scope)


@router.delete("/scopes/{scope_id}")
def destroy_scope(scope_id: str) -> Dict[str, Any]:
    ctx = _player()
    if scope_id == ROOT_SCOPE_ID:
        raise HTTPException(400, "application scope can not be destroyed")
    _scope(ctx, scope_id).destroy()
    return {"ok": True}


@router.post("/invoke")
def invoke(body: InvokeDTO) -> Dict[str, Any]:
    ctx = _player()
    ctx.invoke(_scope(ctx, body.scope), body.name)
    return {"ok": True}


@router.post("/dispatch")
def dispatch(body: DispatchDTO) -> Dict[str, Any]:
    ctx = _player()
    ctx.dispatch(_scope(ctx, body.scope), body.event, body.widget)
    return {"ok": True}


@router.post("/condition")
def run_condition(body: ConditionDTO) -> Dict[str, Any]:
    ctx = _player()
    fired = ctx.run_condition(_scope(ctx, body.scope), body.conditions)
    return {"fired": fired}


@router.post("/reset")
def reset() -> Dict[str, Any]:
    ctx = _player()
    return {"ok": ctx.reset()}


@router.get("/session")
def session_data() -> Dict[str, Any]:
    return _player().session.data


@router.get("/journal")
def journal(
    limit: int = 100,
    scope: Optional[str] = None,
    type: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Dict[str, Any]]:
    ctx = _player()
    try:
        entries = ctx.journal.list_recent(limit=limit, scope_id=scope, action_type=type, status=status)
    except ValueError:
        raise HTTPException(400, f"unknown status '{status}'")
    return [
        {
            "ts": e.ts.isoformat(),
            "scope": e.scope_id,
            "type": e.action_type,
            "status": e.status.value,
            "error": e.error,
            "preview": e.payload_preview,
        }
        for e in entries
    ]


@router.get("/journal/stats")
def journal_stats() -> Dict[str, Any]:
    j = _player().journal
    return {"size": len(j), "max_entries": j.max_entries, "counts": j.status_counts()}
