from flask import current_app, jsonify


class BallotError(Exception):
    code = "unknown"
    http_status = 500

    def __init__(self, message=None):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self):
        return {"ok": False, "error": self.code, "message": self.message}


class InvalidArgument(BallotError):
    code = "invalid-argument"
    http_status = 400


class NotFound(BallotError):
    code = "not-found"
    http_status = 404


class FailedPrecondition(BallotError):
    code = "failed-precondition"
    http_status = 412


class PermissionDenied(BallotError):
    code = "permission-denied"
    http_status = 403


class ResourceExhausted(BallotError):
    code = "resource-exhausted"
    http_status = 429


class RateLimitExceeded(ResourceExhausted):
    def __init__(self, message=None, key=None):
        super().__init__(message or "Rate limit exceeded")
        self.key = key


class Internal(BallotError):
    code = "internal"
    http_status = 500


def register_error_handlers(app):
    @app.errorhandler(BallotError)
    def handle_ballot_error(error):
        if error.http_status >= 500:
            current_app.logger.error("%s: %s", error.code, error.message)
        return jsonify(error.to_dict()), error.http_status
