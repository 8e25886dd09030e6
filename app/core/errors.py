class AppError(Exception):
    """Base for errors reported to the API caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ValidationError(AppError):
    status_code = 400

class NotFoundError(AppError):
    status_code = 404

class ConflictError(AppError):
    status_code = 409

class PayloadTooLargeError(AppError):
    status_code = 413

class DownstreamError(AppError):
    """Storage provider, mail provider or database failure."""

    status_code = 502

def validation_error_from(exc) -> ValidationError:
    """Flatten a pydantic ValidationError into our client error."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return ValidationError("; ".join(parts) or "Invalid request")
