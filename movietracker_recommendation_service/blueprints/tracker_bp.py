"""Movie tracker HTTP endpoints."""
import azure.functions as func
import logging
import json

from movietracker_recommendation_service.exceptions import (
    CatalogLoadError,
    MalformedProgressError,
    MovieNotFoundError,
)
from movietracker_recommendation_service.models import MovieQuery
from movietracker_recommendation_service.services import MovieTrackerService

# Initialize blueprint
bp = func.Blueprint()

# Initialize service (singleton pattern)
tracker_service = MovieTrackerService()

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 50


def _json_response(body, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body),
        status_code=status_code,
        mimetype="application/json"
    )


def _error_response(message: str, status_code: int) -> func.HttpResponse:
    return _json_response({"error": message}, status_code=status_code)


def _parse_movie_id(req: func.HttpRequest):
    """Return (movie_id, None) or (None, error response)."""
    movie_id = req.route_params.get('movie_id')

    if not movie_id:
        return None, _error_response("movie_id is required", 400)

    try:
        return int(movie_id), None
    except ValueError:
        return None, _error_response("movie_id must be an integer", 400)


def _handle_failure(e: Exception, action: str) -> func.HttpResponse:
    if isinstance(e, MovieNotFoundError):
        return _error_response(str(e), 404)
    if isinstance(e, MalformedProgressError):
        return _error_response(str(e), 400)
    if isinstance(e, CatalogLoadError):
        logger.error(f"Catalog unavailable while {action}: {str(e)}")
        return _error_response("Movie catalog unavailable", 503)

    logger.error(f"Error {action}: {str(e)}", exc_info=True)
    return _error_response("Internal server error", 500)


@bp.route(route="movies", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def list_movies(req: func.HttpRequest) -> func.HttpResponse:
    """
    Browse the catalog.

    Query Parameters:
        - q: Search text (title, song or year)
        - category: all, animation or live-action (default: all)
        - status: all, watched, unwatched or rated (default: all)
        - sort: title, year-asc, year-desc or rating (default: title)
    """
    try:
        try:
            query = MovieQuery.from_params(req.params)
        except ValueError as e:
            return _error_response(str(e), 400)

        movies, progress = tracker_service.browse_with_progress(query)

        results = []
        for movie in movies:
            data = movie.to_dict()
            record = progress.get(movie.id)
            data['progress'] = record.to_dict() if record is not None else None
            results.append(data)

        return _json_response({
            "count": len(results),
            "movies": results
        })

    except Exception as e:
        return _handle_failure(e, "listing movies")


@bp.route(route="movies/{movie_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_movie(req: func.HttpRequest) -> func.HttpResponse:
    """Get a single movie with its progress."""
    movie_id, error = _parse_movie_id(req)
    if error:
        return error

    try:
        movie = tracker_service.get_movie(movie_id)
        record = tracker_service.get_progress(movie_id)

        data = movie.to_dict()
        data['progress'] = record.to_dict() if record is not None else None
        return _json_response(data)

    except Exception as e:
        return _handle_failure(e, "getting movie")


@bp.route(route="movies/{movie_id}/watched", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def toggle_watched(req: func.HttpRequest) -> func.HttpResponse:
    """Toggle a movie's watched status."""
    movie_id, error = _parse_movie_id(req)
    if error:
        return error

    try:
        record = tracker_service.toggle_watched(movie_id)
        return _json_response({"movie_id": movie_id, "progress": record.to_dict()})

    except Exception as e:
        return _handle_failure(e, "toggling watched status")


@bp.route(route="movies/{movie_id}/rating", methods=["PUT"], auth_level=func.AuthLevel.ANONYMOUS)
def set_rating(req: func.HttpRequest) -> func.HttpResponse:
    """
    Rate a movie.

    Body:
        {"rating": 0-5}. Sending the current rating again clears it.
    """
    movie_id, error = _parse_movie_id(req)
    if error:
        return error

    try:
        try:
            body = req.get_json()
        except ValueError:
            return _error_response("Request body must be JSON", 400)

        if not isinstance(body, dict) or 'rating' not in body:
            return _error_response("rating is required", 400)

        record = tracker_service.set_rating(movie_id, body['rating'])
        return _json_response({"movie_id": movie_id, "progress": record.to_dict()})

    except Exception as e:
        return _handle_failure(e, "setting rating")


@bp.route(route="recommendations", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_recommendations(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get personalized recommendations.

    Query Parameters:
        - n: Number of recommendations (default: configured limit, max: 50)
    """
    try:
        n = req.params.get('n')
        if n is not None:
            try:
                n = int(n)
            except ValueError:
                return _error_response("n must be an integer", 400)

            if n < 1 or n > MAX_RECOMMENDATIONS:
                return _error_response(f"n must be between 1 and {MAX_RECOMMENDATIONS}", 400)

        profile, recommendations = tracker_service.get_profile_and_recommendations(limit=n)

        response = {
            "count": len(recommendations),
            "has_signal": profile.has_signal,
            "recommendations": [rec.to_dict() for rec in recommendations]
        }

        if not recommendations:
            response["message"] = "You've watched all movies!"
        elif not profile.has_signal:
            response["message"] = "Start rating movies to get personalized recommendations!"

        return _json_response(response)

    except Exception as e:
        return _handle_failure(e, "getting recommendations")


# noinspection PyUnusedLocal
@bp.route(route="profile", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_profile(req: func.HttpRequest) -> func.HttpResponse:
    """Get the user's preference profile."""
    try:
        return _json_response(tracker_service.get_profile().to_dict())

    except Exception as e:
        return _handle_failure(e, "getting profile")


# noinspection PyUnusedLocal
@bp.route(route="stats", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_stats(req: func.HttpRequest) -> func.HttpResponse:
    """Get watch/rating statistics."""
    try:
        return _json_response(tracker_service.get_stats())

    except Exception as e:
        return _handle_failure(e, "getting stats")


# noinspection PyUnusedLocal
@bp.route(route="playlist", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_playlist(req: func.HttpRequest) -> func.HttpResponse:
    """Get the soundtrack playlist built from rated movies."""
    try:
        playlist = tracker_service.get_soundtrack_playlist()

        if not playlist['songs']:
            playlist['message'] = "Rate some movies to create your personalized playlist!"

        return _json_response(playlist)

    except Exception as e:
        return _handle_failure(e, "getting playlist")


# noinspection PyUnusedLocal
@bp.route(route="progress", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def export_progress(req: func.HttpRequest) -> func.HttpResponse:
    """Export progress as {"<movieId>": {"watched": bool, "rating": int}}."""
    try:
        return _json_response(tracker_service.export_progress())

    except Exception as e:
        return _handle_failure(e, "exporting progress")


@bp.route(route="progress", methods=["PUT"], auth_level=func.AuthLevel.ANONYMOUS)
def import_progress(req: func.HttpRequest) -> func.HttpResponse:
    """Replace progress with an exported progress map."""
    try:
        count = tracker_service.import_progress(req.get_body())
        return _json_response({"imported": count})

    except Exception as e:
        return _handle_failure(e, "importing progress")


# noinspection PyUnusedLocal
@bp.route(route="tracker/health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return _json_response({
        "status": "healthy",
        "service": "movie-tracker-service",
        "version": "1.0.0"
    })
