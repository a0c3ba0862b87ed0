"""
Reconciliation API router.
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from atlas.asset_match import (
    Config,
    PastedRecord,
    RegistryRecord,
    SystemRecord,
    build_update_preview,
    count_saveable,
    is_best_guess,
    match_batch,
    parse_pasted_rows,
    rank,
    similarity,
    summarize_batch,
    top_score,
)
from atlas.asset_match.ranker import registry_text, system_text

from backend.api.models import (
    ConfirmMatchRequest,
    MatchBatchRequest,
    PreviewRequest,
    RankRequest,
    SimilarityRequest,
)
from backend.api.security import acting_user, require_api_key, resolve_user
from backend.core.db import count_learned_patterns
from backend.core.reconcile import get_config, get_memory

router = APIRouter(prefix="/api/reconcile", tags=["Reconcile"])


def _system(model) -> SystemRecord:
    return SystemRecord(**model.model_dump())


def _registry(model) -> RegistryRecord:
    return RegistryRecord(**model.model_dump())


def _parse_text(text: str) -> list[PastedRecord]:
    try:
        return parse_pasted_rows(text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _result_dict(result) -> dict:
    return {
        "pasted": vars(result.pasted),
        "match_type": result.match_type.name.lower(),
        "label": result.label,
        "score": result.score,
        "pool_index": result.pool_index,
        "matched": vars(result.matched) if result.matched else None,
    }


@router.post("/similarity")
def score_pair(req: SimilarityRequest):
    """Score two descriptions (0-1)."""
    return {"score": similarity(req.a, req.b, get_config().settings)}


@router.post("/rank")
def rank_candidates(req: RankRequest):
    """
    Rank registry records for one system record.
    Learned patterns boost candidates resembling earlier confirmed links.
    """
    config = get_config()
    candidates = rank(
        _system(req.item),
        [_registry(r) for r in req.pool],
        get_memory().patterns,
        config.settings,
    )
    shown = candidates[:req.limit] if req.limit else candidates

    return {
        "candidates": [
            {
                "record": vars(c.record),
                "base_score": c.base_score,
                "bonus_score": c.bonus_score,
                "final_score": c.final_score,
            }
            for c in shown
        ],
        "count": len(candidates),
        "top_score": top_score(candidates),
        "best_guess": is_best_guess(candidates, config.settings),
    }


@router.post("/match-batch")
def run_match_batch(req: MatchBatchRequest):
    """
    Match pasted rows against system records.
    One result per row, in paste order.
    """
    if req.pasted is None and req.pasted_text is None:
        raise HTTPException(status_code=400, detail="Provide pasted or pasted_text")

    if req.pasted is not None:
        rows = [PastedRecord(**r.model_dump()) for r in req.pasted]
    else:
        rows = _parse_text(req.pasted_text)

    outcome = match_batch(rows, [_system(r) for r in req.pool], settings=get_config().settings)

    return {
        "results": [_result_dict(r) for r in outcome.results],
        "consumed": sorted(outcome.consumed),
        "summary": summarize_batch(outcome.results),
    }


@router.post("/preview")
def preview_updates(req: PreviewRequest):
    """Match pasted rows for a unit and flag tag problems before saving."""
    config = get_config()
    if req.unit_mapping is not None:
        config = Config(settings=config.settings, unit_mapping=req.unit_mapping)

    updates = build_update_preview(
        _parse_text(req.pasted_text),
        [_system(r) for r in req.pool],
        [_registry(r) for r in req.registry],
        req.target_unit,
        config,
        inventory=[_system(r) for r in req.inventory] if req.inventory is not None else None,
    )

    return {
        "updates": [
            {
                "row": u.row,
                "status": u.status.value,
                "pasted": vars(u.pasted),
                "match": _result_dict(u.match) if u.match else None,
                "registry_item": vars(u.registry_item) if u.registry_item else None,
            }
            for u in updates
        ],
        "count": len(updates),
        "valid_count": count_saveable(updates),
    }


@router.post("/confirm", dependencies=[Depends(require_api_key)])
def confirm_match(
    req: ConfirmMatchRequest,
    background_tasks: BackgroundTasks,
    user: Optional[str] = Depends(acting_user),
):
    """
    Record a confirmed link as a learned pattern.
    The X-User header names the user; a body `user` only fills in without it.
    The pattern is usable for ranking immediately; the database write
    happens in the background and never undoes the link.
    """
    config = get_config()
    memory = get_memory()
    system_item = _system(req.system)
    registry_item = _registry(req.registry)

    score = similarity(system_text(system_item), registry_text(registry_item), config.settings)
    pattern = memory.remember(system_item, registry_item, score, user=resolve_user(user, req.user))
    background_tasks.add_task(memory.persist, pattern)

    return {"success": True, "score": score, "pattern": pattern.to_dict()}


@router.get("/patterns")
def list_patterns(limit: int = Query(50, ge=1, le=300)):
    """Most recent learned patterns held in memory, newest first."""
    patterns = get_memory().patterns[:limit]
    return {"patterns": [p.to_dict() for p in patterns], "count": len(patterns)}


@router.get("/status")
def reconcile_status():
    """Get reconciliation system status."""
    memory = get_memory()
    try:
        stored = count_learned_patterns()
    except Exception as e:
        stored = None
        status_error = str(e)
    else:
        status_error = None

    return {
        "patterns_in_memory": len(memory),
        "pattern_limit": memory.limit,
        "patterns_stored": stored,
        "store_error": status_error,
        "units_mapped": sorted(get_config().unit_mapping),
    }
