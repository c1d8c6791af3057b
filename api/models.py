"""
API request and response models for the ranker REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
rankings/models.py, which own the internal domain representation. Route
handlers map between the two.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from rankings.models import Ranking

# Earliest and latest contest years accepted on create.
MIN_YEAR = 1956
MAX_YEAR = 2100


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    Usernames are case-sensitive and stored exactly as given, so no whitespace
    stripping is applied to them.
    """

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=1, max_length=255)
    profile_pic_url: Optional[str] = Field(default=None, max_length=2048)
    description: Optional[str] = Field(default=None, max_length=2000)


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class LoginResponse(BaseModel):
    """Bearer token plus the identity it was issued for."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    username: str
    user_id: uuid.UUID


# ---------------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------------


class RankingCreate(BaseModel):
    """Request body for POST /api/v1/rankings.

    ranking_string is passed through untouched; only its presence is checked.
    """

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    year: int = Field(ge=MIN_YEAR, le=MAX_YEAR)
    ranking_string: str = Field(min_length=1)


class RankingUpdate(BaseModel):
    """Request body for PUT /api/v1/rankings/{id}. The year cannot be changed."""

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    ranking_string: str = Field(min_length=1)


class RankingResponse(BaseModel):
    """A single ranking as returned to clients."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    description: Optional[str]
    year: int
    ranking_string: str
    updated_at: str

    @classmethod
    def from_ranking(cls, ranking: Ranking) -> "RankingResponse":
        """Build a RankingResponse from a domain Ranking."""
        return cls(
            id=ranking.id,
            owner_id=ranking.owner_id,
            name=ranking.name,
            description=ranking.description,
            year=ranking.year,
            ranking_string=ranking.ranking_string,
            updated_at=ranking.updated_at,
        )
