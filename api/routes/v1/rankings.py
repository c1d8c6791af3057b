"""
api/routes/v1/rankings.py -- Ranking CRUD routes for the ranker REST API.

Routes:
  POST   /rankings        -- create a ranking owned by the caller
  GET    /rankings        -- list the caller's rankings (newest first)
  GET    /rankings/{id}   -- fetch any ranking by id
  PUT    /rankings/{id}   -- update the caller's ranking
  DELETE /rankings/{id}   -- delete the caller's ranking

Ownership:
  Create, list, update and delete all use the caller's own user id. The store
  matches update/delete on (id, owner_id) in one statement; a miss is reported
  as 404 whether the ranking is absent or belongs to someone else.

  GET /rankings/{id} is NOT owner-scoped: any authenticated user may read any
  ranking by id.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import RankingCreate, RankingResponse, RankingUpdate
from auth.dependencies import get_current_identity
from auth.errors import NotFoundOrForbidden
from auth.models import Identity
from rankings.models import RankingFields
from rankings.store import RankingStore

# Every ranking route requires a valid bearer token. The router-level
# dependency rejects the request before any handler runs.
router = APIRouter(dependencies=[Depends(get_current_identity)])


@router.post("/rankings", response_model=RankingResponse, status_code=201)
def create_ranking(
    request: Request,
    response: Response,
    body: RankingCreate,
    identity: Identity = Depends(get_current_identity),
) -> RankingResponse:
    """Create a ranking owned by the authenticated caller."""
    store: RankingStore = request.app.state.ranking_store
    ranking = store.create(
        identity.user_id,
        RankingFields(
            name=body.name,
            description=body.description,
            year=body.year,
            ranking_string=body.ranking_string,
        ),
    )
    response.headers["Location"] = f"{request.url.path.rstrip('/')}/{ranking.id}"
    return RankingResponse.from_ranking(ranking)


@router.get("/rankings", response_model=list[RankingResponse])
def list_my_rankings(
    request: Request,
    identity: Identity = Depends(get_current_identity),
) -> list[RankingResponse]:
    """List the caller's own rankings, most recently updated first."""
    store: RankingStore = request.app.state.ranking_store
    return [RankingResponse.from_ranking(r) for r in store.list_by_owner(identity.user_id)]


@router.get("/rankings/{ranking_id}", response_model=RankingResponse)
def get_ranking(request: Request, ranking_id: uuid.UUID) -> RankingResponse:
    """Fetch a ranking by id. Ownership is not checked on reads."""
    store: RankingStore = request.app.state.ranking_store
    ranking = store.get_by_id(ranking_id)
    if ranking is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Ranking not found."},
        )
    return RankingResponse.from_ranking(ranking)


@router.put("/rankings/{ranking_id}", response_model=RankingResponse)
def update_ranking(
    request: Request,
    ranking_id: uuid.UUID,
    body: RankingUpdate,
    identity: Identity = Depends(get_current_identity),
) -> RankingResponse:
    """Replace name, description and ranking_string of the caller's ranking."""
    store: RankingStore = request.app.state.ranking_store
    changed = store.update(
        ranking_id,
        identity.user_id,
        RankingFields(name=body.name, description=body.description, ranking_string=body.ranking_string),
    )
    if not changed:
        raise NotFoundOrForbidden()

    updated = store.get_by_id(ranking_id)
    if updated is None:
        # Deleted by a concurrent request between the update and the read
        raise NotFoundOrForbidden()
    return RankingResponse.from_ranking(updated)


@router.delete("/rankings/{ranking_id}", status_code=204)
def delete_ranking(
    request: Request,
    ranking_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
) -> Response:
    """Delete the caller's ranking."""
    store: RankingStore = request.app.state.ranking_store
    if not store.delete(ranking_id, identity.user_id):
        raise NotFoundOrForbidden()
    return Response(status_code=204)
