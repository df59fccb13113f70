"""Movie catalogue, ratings, and the OMDb import."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from watched.core.config import settings
from watched.core.exceptions import BadRequestError, ConflictError, ExternalServiceError, NotFoundError
from watched.models.enums import ActivityKind, ActivityOperation
from watched.models.movie import MAX_RATING, MIN_RATING, Movie, MovieRating
from watched.models.user import User
from watched.services.audit import record_site_activity

logger = logging.getLogger(__name__)

MOVIE_NOT_FOUND = "Movie not found"
ALREADY_RATED = "You have already rated this movie"
RATING_RANGE_MESSAGE = f"Rating must be between {MIN_RATING} and {MAX_RATING}"

SEED_TITLES = (
    "Inception", "Interstellar", "The Dark Knight", "Titanic", "Avatar",
    "The Matrix", "Gladiator", "The Godfather", "The Shawshank Redemption", "Pulp Fiction",
    "Forrest Gump", "Fight Club", "The Lord of the Rings", "The Avengers", "Iron Man",
    "The Lion King", "Star Wars", "Jurassic Park", "Harry Potter", "Deadpool",
    "Spider-Man", "The Batman", "Dune", "Doctor Strange", "Black Panther",
    "Joker", "The Prestige", "Mad Max: Fury Road", "Shutter Island", "Parasite",
)
OMDB_FIELDS = {
    "Title": "title",
    "Year": "year",
    "Genre": "genre",
    "Director": "director",
    "Poster": "poster_url",
    "Actors": "actors",
    "Plot": "plot",
}


def list_movies(db: Session) -> list[Movie]:
    return db.query(Movie).order_by(Movie.id.asc()).all()


def get_movie(db: Session, movie_id: int) -> Movie:
    movie = db.get(Movie, movie_id)
    if not movie:
        raise NotFoundError(MOVIE_NOT_FOUND)
    return movie


def find_rating(db: Session, user_id: int, movie_id: int) -> MovieRating | None:
    return db.query(MovieRating).filter(MovieRating.user_id == user_id, MovieRating.movie_id == movie_id).first()


def rate_movie(db: Session, movie_id: int, rating: int, user: User) -> Movie:
    """Store a rating and refresh the movie's average in the same transaction."""
    if rating < MIN_RATING or rating > MAX_RATING:
        raise BadRequestError(RATING_RANGE_MESSAGE)
    movie = get_movie(db, movie_id)
    if find_rating(db, user.id, movie_id):
        raise ConflictError(ALREADY_RATED)

    try:
        db.add(MovieRating(user_id=user.id, movie_id=movie_id, rating=rating))
        db.flush()
        average = db.query(func.avg(MovieRating.rating)).filter(MovieRating.movie_id == movie_id).scalar()
        movie.average_rating = float(average or 0.0)
        db.add(movie)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Duplicate rating caught by constraint: movie=%s user=%s", movie_id, user.id)
        raise ConflictError(ALREADY_RATED)

    logger.info("Movie rated: movie=%s user=%s rating=%s", movie_id, user.username, rating)
    record_site_activity(db, user_id=user.id, activity=ActivityKind.rating, operation=ActivityOperation.create)
    return movie


def _movie_from_omdb(payload: dict[str, Any]) -> Movie:
    values = {column: payload.get(key) for key, column in OMDB_FIELDS.items()}
    return Movie(**values, average_rating=0.0)


def _fetch_omdb(client: httpx.Client, title: str) -> dict[str, Any]:
    try:
        response = client.get(settings.OMDB_BASE_URL, params={"t": title, "apikey": settings.OMDB_API_KEY})
    except httpx.HTTPError as exc:
        raise ExternalServiceError(f"Error: {exc}", provider="omdb") from exc
    if response.status_code >= 400:
        raise ExternalServiceError(
            f"Error: {response.status_code}",
            provider="omdb",
            status_code=response.status_code,
            content=response.text,
        )
    try:
        data = response.json()
    except ValueError as exc:
        raise ExternalServiceError(
            f"Error: {response.status_code}",
            provider="omdb",
            status_code=response.status_code,
            content=response.text,
        ) from exc
    if not isinstance(data, dict) or not data.get("Title"):
        raise ExternalServiceError(
            f"Error: no movie returned for {title}",
            provider="omdb",
            status_code=response.status_code,
            content=response.text,
        )
    return data


def fetch_movies_from_provider(
    db: Session,
    *,
    titles: tuple[str, ...] = SEED_TITLES,
    transport: httpx.BaseTransport | None = None,
) -> list[Movie]:
    with httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS, transport=transport) as client:
        movies = [_movie_from_omdb(_fetch_omdb(client, title)) for title in titles]

    db.add_all(movies)
    db.commit()
    for movie in movies:
        db.refresh(movie)
    logger.info("Imported %s movies from OMDb", len(movies))
    return movies
