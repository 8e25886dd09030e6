from datetime import datetime, timezone
from typing import Annotated
from pydantic import AfterValidator, PlainSerializer

# Largest integer a float64 represents exactly (JavaScript Number.MAX_SAFE_INTEGER).
MAX_SAFE_INTEGER = 2**53 - 1

def json_safe_int(value: int | None) -> int | str | None:
    """Convert a BIGINT column value for a JSON body.

    Values inside the float64-exact range are emitted as numbers, anything
    larger as a decimal string so clients never see a rounded value.
    """
    if value is None:
        return None
    value = int(value)
    if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
        return value
    return str(value)

def as_utc(value: datetime) -> datetime:
    # naive timestamps are read as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

ByteCount = Annotated[int, PlainSerializer(json_safe_int, return_type=int | str, when_used="json")]
UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]
