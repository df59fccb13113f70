"""Movie catalogue and rating endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from watched.core.deps import get_current_user, require_admin
from watched.core.rate_limit import rate_limit
from watched.db.session import get_db
from watched.models.user import User
from watched.schemas.common import MessageResponse
from watched.schemas.movie import MovieOut, RateMovieRequest
from watched.services.movies import fetch_movies_from_provider, get_movie, list_movies, rate_movie

router = APIRouter(dependencies=[Depends(rate_limit())])


@router.get("", response_model=list[MovieOut])
def get_all_movies(db: Session = Depends(get_db)) -> list[MovieOut]:
    return [MovieOut.model_validate(movie) for movie in list_movies(db)]


@router.post("/fetch", response_model=list[MovieOut])
def fetch_movies(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[MovieOut]:
    return [MovieOut.model_validate(movie) for movie in fetch_movies_from_provider(db)]


@router.get("/{movie_id}", response_model=MovieOut)
def get_one_movie(movie_id: int, db: Session = Depends(get_db)) -> MovieOut:
    return MovieOut.model_validate(get_movie(db, movie_id))


@router.post("/{movie_id}/ratemovie", response_model=MessageResponse)
def rate(
    movie_id: int,
    payload: RateMovieRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    rate_movie(db, movie_id, payload.rating, current_user)
    return MessageResponse(message="Rating submitted successfully")
