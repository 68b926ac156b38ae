from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


DEFAULT_TIME = "09:00"
DEFAULT_CATEGORY = "Other"
DEFAULT_IMAGE = "📅"

OPTIONAL_DEFAULTS = {
    "time": DEFAULT_TIME,
    "category": DEFAULT_CATEGORY,
    "image_url": DEFAULT_IMAGE,
}

REQUIRED_FIELDS = (
    "title",
    "short_description",
    "full_description",
    "date",
    "location",
    "price",
    "created_by",
)


def _as_text(value):
    # numbers are accepted for free-text fields such as price
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class EventCreate(BaseModel):
    title: str = Field(..., examples=["Jazz Night"])
    short_description: str = Field(..., examples=["Live jazz by the river"])
    full_description: str = Field(..., examples=["An evening of live jazz with local bands."])
    date: str = Field(..., examples=["2026-11-20"])
    time: str = Field(DEFAULT_TIME, examples=["19:30"])
    location: str = Field(..., examples=["Riverside Park"])
    price: str = Field(..., examples=["15"])
    category: str = Field(DEFAULT_CATEGORY, examples=["Music"])
    image_url: str = Field(DEFAULT_IMAGE, examples=["🎷"])
    created_by: str = Field(..., examples=["host@example.com"])

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Jazz Night",
                "shortDescription": "Live jazz by the river",
                "fullDescription": "An evening of live jazz with local bands.",
                "date": "2026-11-20",
                "time": "19:30",
                "location": "Riverside Park",
                "price": "15",
                "category": "Music",
                "imageUrl": "🎷",
                "createdBy": "host@example.com",
            }
        },
    )

    @field_validator(*REQUIRED_FIELDS, mode="before")
    @classmethod
    def require_non_blank(cls, v):
        v = _as_text(v)
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Field is required")
        return v

    @field_validator("time", "category", "image_url", mode="before")
    @classmethod
    def default_when_blank(cls, v, info):
        v = _as_text(v)
        if v is None or (isinstance(v, str) and not v.strip()):
            return OPTIONAL_DEFAULTS[info.field_name]
        return v.strip() if isinstance(v, str) else v


class EventResponse(BaseModel):
    id: str
    title: str
    short_description: str
    full_description: str
    date: str
    time: str
    location: str
    price: str
    category: str
    image_url: str
    created_by: str
    created_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "1",
                "title": "Jazz Night",
                "shortDescription": "Live jazz by the river",
                "fullDescription": "An evening of live jazz with local bands.",
                "date": "2026-11-20",
                "time": "19:30",
                "location": "Riverside Park",
                "price": "15",
                "category": "Music",
                "imageUrl": "🎷",
                "createdBy": "host@example.com",
                "createdAt": "2026-10-17T10:30:00+00:00",
            }
        },
    )

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v) if v is not None else v

    @field_serializer("created_at", when_used="json")
    def serialize_datetime(self, value: datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return dt.isoformat()
