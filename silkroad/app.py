from __future__ import annotations

import os

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import require_admin, require_user
from .auth.models import LoginRequest
from .auth.users import authenticate
from .catalog import data_store
from .catalog.images import placeholder_gradient
from .catalog.models import (
    Site,
    SiteCreate,
    SiteUpdate,
    Tag,
    TagCreate,
    TagGroup,
    TagUpdate,
)
from .preferences.session import get_preferences, update_preferences
from .recommendations.engine import RecommendationEngine
from .recommendations.models import (
    PreferenceUpdate,
    RecommendationOutcome,
    SimilarityMatrixResponse,
    SimilarityResponse,
    SimilarSpotsResponse,
    UserPreference,
)
from .recommendations.similarity import similarity_matrix

app = FastAPI(title="Silk Road Travel Recommendation API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "silkroad-secret-change-in-production"),
)

engine = RecommendationEngine()


def _get_site_or_404(site_id: str) -> Site:
    site = data_store.get_site_by_id(site_id)
    if site is None:
        raise HTTPException(status_code=404, detail=f"Site {site_id} not found")
    return site


def _recommend(preference: UserPreference) -> RecommendationOutcome:
    outcome = engine.recommend(
        data_store.load_sites(), data_store.load_tags(), preference,
    )
    return outcome.model_copy(update={"results": outcome.sorted_results})


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    sites = data_store.load_sites()
    tags = data_store.load_tags()
    return {
        "site_count": len(sites),
        "tag_count": len(tags),
        "categories": sorted({tag.category for tag in tags}),
        "cities": sorted({site.city for site in sites if site.city}),
    }


@app.get("/tags", response_model=list[Tag])
def list_tags() -> list[Tag]:
    return data_store.load_tags()


@app.get("/tags/by-category", response_model=list[TagGroup])
def list_tags_by_category() -> list[TagGroup]:
    return data_store.tags_by_category()


@app.get("/sites", response_model=list[Site])
def list_sites(tags: str = "") -> list[Site]:
    tag_ids = [t.strip() for t in tags.split(",") if t.strip()]
    return data_store.filter_sites_by_tags(tag_ids)


@app.get("/sites/{site_id}")
def get_site(site_id: str) -> dict:
    site = _get_site_or_404(site_id)
    return {
        **site.model_dump(),
        "placeholder": placeholder_gradient(site, data_store.get_tag_map()),
    }


@app.get("/sites/{site_id}/tags", response_model=list[Tag])
def get_site_tags(site_id: str) -> list[Tag]:
    return data_store.get_site_tags(_get_site_or_404(site_id))


@app.get("/sites/{site_id}/similar", response_model=SimilarSpotsResponse)
def get_similar_sites(
    site_id: str,
    limit: int = Query(default=5, ge=1, le=50),
) -> SimilarSpotsResponse:
    similar = engine.similar_spots(
        site_id, data_store.load_sites(), data_store.load_tags(), limit,
    )
    return SimilarSpotsResponse(site_id=site_id, similar=similar)


@app.get("/similarity", response_model=SimilarityResponse)
def get_similarity(a: str, b: str) -> SimilarityResponse:
    site_a = _get_site_or_404(a)
    site_b = _get_site_or_404(b)
    score = engine.similarity(site_a, site_b, data_store.load_tags())
    return SimilarityResponse(site_a=a, site_b=b, similarity=round(score, 4))


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


# ── User endpoints ───────────────────────────────────────────────────────


@app.get("/preferences", response_model=UserPreference)
def read_preferences(
    request: Request,
    user: dict = Depends(require_user),
) -> UserPreference:
    return get_preferences(request.session)


@app.put("/preferences", response_model=UserPreference)
def write_preferences(
    body: PreferenceUpdate,
    request: Request,
    user: dict = Depends(require_user),
) -> UserPreference:
    return update_preferences(request.session, body)


@app.get("/recommendations", response_model=RecommendationOutcome)
def recommendations_for_session(
    request: Request,
    user: dict = Depends(require_user),
) -> RecommendationOutcome:
    return _recommend(get_preferences(request.session))


@app.post("/recommendations", response_model=RecommendationOutcome)
def recommendations(
    body: UserPreference,
    user: dict = Depends(require_user),
) -> RecommendationOutcome:
    return _recommend(body)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.post("/admin/sites", response_model=Site, status_code=201)
def create_site(body: SiteCreate, user: dict = Depends(require_admin)) -> Site:
    try:
        return data_store.add_site(body)
    except data_store.DuplicateSiteError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@app.put("/admin/sites/{site_id}", response_model=Site)
def edit_site(
    site_id: str,
    body: SiteUpdate,
    user: dict = Depends(require_admin),
) -> Site:
    site = data_store.update_site(site_id, body)
    if site is None:
        raise HTTPException(status_code=404, detail=f"Site {site_id} not found")
    return site


@app.delete("/admin/sites/{site_id}")
def remove_site(site_id: str, user: dict = Depends(require_admin)) -> dict:
    if not data_store.delete_site(site_id):
        raise HTTPException(status_code=404, detail=f"Site {site_id} not found")
    return {"status": "deleted", "id": site_id}


@app.post("/admin/tags", response_model=Tag, status_code=201)
def create_tag(body: TagCreate, user: dict = Depends(require_admin)) -> Tag:
    try:
        return data_store.add_tag(body)
    except data_store.DuplicateTagError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@app.put("/admin/tags/{tag_id}", response_model=Tag)
def edit_tag(
    tag_id: str,
    body: TagUpdate,
    user: dict = Depends(require_admin),
) -> Tag:
    tag = data_store.update_tag(tag_id, body)
    if tag is None:
        raise HTTPException(status_code=404, detail=f"Tag {tag_id} not found")
    return tag


@app.delete("/admin/tags/{tag_id}")
def remove_tag(tag_id: str, user: dict = Depends(require_admin)) -> dict:
    if not data_store.delete_tag(tag_id):
        raise HTTPException(status_code=404, detail=f"Tag {tag_id} not found")
    return {"status": "deleted", "id": tag_id}


@app.get("/admin/similarity-matrix", response_model=SimilarityMatrixResponse)
def get_similarity_matrix(user: dict = Depends(require_admin)) -> SimilarityMatrixResponse:
    sites = data_store.load_sites()
    matrix = similarity_matrix(sites, data_store.load_tags(), engine.config)
    return SimilarityMatrixResponse(
        site_ids=[site.id for site in sites],
        matrix=matrix.round(4).tolist(),
    )
