"""Pydantic schemas for movies and ratings."""

from __future__ import annotations

from pydantic import Field

from watched.schemas.common import CamelModel


class MovieOut(CamelModel):
    movie_id: int = Field(validation_alias="id")
    title: str
    year: str | None = None
    genre: str | None = None
    director: str | None = None
    poster_url: str | None = None
    actors: str | None = None
    plot: str | None = None
    average_rating: float = 0.0


class RateMovieRequest(CamelModel):
    # Range is checked by the service so out-of-range values get the documented message.
    rating: int
