from __future__ import annotations

import os

from fastapi import Depends, FastAPI, HTTPException, Request
from starlette.middleware.sessions import SessionMiddleware

from .analyses.lifecycle import AnalysisLifecycle
from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .auth.dependencies import optional_user_id, require_admin, require_user, require_user_id
from .auth.users import authenticate
from .collection.models import SaveCollectionRequest, UpdateCollectionRequest
from .collection.save_status import SaveStatusResolver
from .collection.store import CollectionStore
from .common.results import OperationResult
from .recommendations.models import LoginRequest, RecommendationRequest, Top5Request
from .recommendations.retrieval import RecommendationService
from .services import (
    get_collection_store,
    get_lifecycle,
    get_recommendation_service,
    get_save_status_resolver,
)
from .storage.catalog import get_catalog

app = FastAPI(title="Coffee Recommendation API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "coffee-reco-secret-change-in-production"),
)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    df = get_catalog().frame
    return {
        "coffees": len(df),
        "categories": sorted(df["category"].dropna().unique().tolist()),
        "origins": sorted(df["origin"].dropna().unique().tolist()),
    }


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Recommendation endpoints ─────────────────────────────────────────────
# Business outcomes (validation, duplicates, ownership) always come back as
# 200 with a result code; only auth failures use HTTP status codes.


@app.post("/reco", response_model=OperationResult)
def recommend(
    body: RecommendationRequest,
    user_id: int | None = Depends(optional_user_id),
    lifecycle: AnalysisLifecycle = Depends(get_lifecycle),
) -> OperationResult:
    return lifecycle.create(body.scores(), user_id, body.save_analysis)


@app.post("/reco/top5", response_model=OperationResult)
def recommend_top5(
    body: Top5Request,
    service: RecommendationService = Depends(get_recommendation_service),
) -> OperationResult:
    return service.top_matches(body.scores(), body.limit_similar)


@app.get("/reco/similar/{coffee_id}", response_model=OperationResult)
def similar_blends(
    coffee_id: str,
    limit_similar: str | None = None,
    service: RecommendationService = Depends(get_recommendation_service),
) -> OperationResult:
    return service.similar_to(coffee_id, limit_similar)


# ── Analysis endpoints ───────────────────────────────────────────────────


@app.get("/analyses/past", response_model=OperationResult)
def past_analyses(
    user_id: int = Depends(require_user_id),
    lifecycle: AnalysisLifecycle = Depends(get_lifecycle),
) -> OperationResult:
    return lifecycle.list_past(user_id)


@app.post("/analyses/sweep", response_model=OperationResult)
def sweep_analyses(
    user: dict = Depends(require_admin),
    lifecycle: AnalysisLifecycle = Depends(get_lifecycle),
) -> OperationResult:
    return lifecycle.sweep_expired()


# ── Collection endpoints ─────────────────────────────────────────────────


@app.post("/collections", response_model=OperationResult)
def save_collection(
    body: SaveCollectionRequest,
    user_id: int = Depends(require_user_id),
    collections: CollectionStore = Depends(get_collection_store),
) -> OperationResult:
    return collections.save(user_id, body.analysis_id, body.name, body.comment)


@app.get("/collections", response_model=OperationResult)
def get_collections(
    collection_id: str | None = None,
    user_id: int = Depends(require_user_id),
    collections: CollectionStore = Depends(get_collection_store),
) -> OperationResult:
    return collections.get(user_id, collection_id)


@app.get("/collections/name-available", response_model=OperationResult)
def collection_name_available(
    name: str = "",
    user_id: int = Depends(require_user_id),
    collections: CollectionStore = Depends(get_collection_store),
) -> OperationResult:
    return collections.exists(user_id, name)


@app.get("/collections/save-status", response_model=OperationResult)
def save_status(
    analysis_id: str | None = None,
    user_id: int = Depends(require_user_id),
    resolver: SaveStatusResolver = Depends(get_save_status_resolver),
) -> OperationResult:
    return resolver.resolve(user_id, analysis_id)


@app.put("/collections/{collection_id}", response_model=OperationResult)
def update_collection(
    collection_id: str,
    body: UpdateCollectionRequest,
    user_id: int = Depends(require_user_id),
    collections: CollectionStore = Depends(get_collection_store),
) -> OperationResult:
    return collections.update(user_id, collection_id, body.name, body.comment)


@app.delete("/collections/{collection_id}", response_model=OperationResult)
def delete_collection(
    collection_id: str,
    user_id: int = Depends(require_user_id),
    collections: CollectionStore = Depends(get_collection_store),
) -> OperationResult:
    return collections.delete(user_id, collection_id)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())
