from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from bleach import clean

class ApiModel(BaseModel):
    """
    Base for every request/response body.
    JSON keys are camelCase, snake_case is accepted on input as well.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

def sanitize_text(value: Optional[str]) -> Optional[str]:
    """Escape markup in free text fields."""
    if value is None:
        return None
    return clean(value, strip=True)

def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC; convert offset-aware input."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
