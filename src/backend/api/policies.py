from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from common.policy_engine.dates import InvalidExpenseDate
from connectors.policies.categories import load_categories
from connectors.policies.config import get_policy_config
from connectors.policies.loader import PolicyFileError
from connectors.policies.store import PolicyStore
from pipelines.audit import AuditLog
from pipelines.submit import SubmitPipeline, SubmitRequest


router = APIRouter(tags=["policies"])


@lru_cache(maxsize=1)
def get_policy_store() -> PolicyStore:
    return PolicyStore(get_policy_config().policies_dir)


def get_audit_log() -> AuditLog:
    return AuditLog(get_policy_config().audit_log_path)


def get_submit_pipeline(
    store: PolicyStore = Depends(get_policy_store),
    audit: AuditLog = Depends(get_audit_log),
) -> SubmitPipeline:
    return SubmitPipeline(store=store, audit=audit)


def _dump_rules(rules) -> list[dict[str, Any]]:
    return [rule.model_dump(mode="json", exclude_none=True) for rule in rules]


@router.get("/policies")
def list_policies(
    date: str | None = Query(None),
    all: bool = Query(False),
    categories: bool = Query(False),
    store: PolicyStore = Depends(get_policy_store),
):
    requested = date or datetime.now(timezone.utc).isoformat()
    try:
        snapshot = store.snapshot()
        active = snapshot.active_rules(requested)
    except InvalidExpenseDate as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except PolicyFileError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    response: dict[str, Any] = {
        "requestedDate": requested,
        "active": _dump_rules(active),
        "totalRules": len(snapshot.rules),
    }
    if all:
        response["all"] = _dump_rules(snapshot.rules)
    if categories:
        try:
            cats = load_categories(get_policy_config().categories_file)
        except (OSError, PolicyFileError) as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        response["categories"] = [c.model_dump() for c in cats]
    return response


@router.post("/policies/reload")
def reload_policies(store: PolicyStore = Depends(get_policy_store)):
    try:
        snapshot = store.reload()
    except PolicyFileError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"totalRules": len(snapshot.rules), "sourceFiles": list(snapshot.source_files)}


@router.post("/submit")
def submit_expense(
    request: SubmitRequest,
    pipeline: SubmitPipeline = Depends(get_submit_pipeline),
):
    try:
        result = pipeline.submit(request)
    except InvalidExpenseDate as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except PolicyFileError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return result.model_dump(mode="json", by_alias=True)
