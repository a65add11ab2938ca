# Overview: Request decorators for API routes.

from functools import wraps
from flask import current_app, jsonify

from homestock.errors import (
    AutoNumberConflict,
    CycleError,
    HierarchyError,
    LocationNotFound,
)


def _status_for(exc: HierarchyError) -> int:
    if isinstance(exc, LocationNotFound):
        return 404
    if isinstance(exc, AutoNumberConflict):
        return 409
    return 400


def handle_hierarchy_errors(failure_message: str):
    """
    Translate service errors into JSON responses.

    - LocationNotFound -> 404
    - AutoNumberConflict -> 409 with retryable=true
    - CycleError -> 400 with the cycle path
    - other HierarchyError / ValueError -> 400
    - anything else is logged and returns 500
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except HierarchyError as exc:
                body = {"error": str(exc), "details": exc.details}
                if isinstance(exc, CycleError):
                    body["cycle"] = exc.cycle
                if exc.retryable:
                    body["retryable"] = True
                return jsonify(body), _status_for(exc)
            except ValueError as exc:
                return jsonify({"error": str(exc)}), 400
            except Exception:
                current_app.logger.exception(failure_message)
                return jsonify({"error": "Internal server error"}), 500
        return decorated_function
    return decorator
