import json
from typing import Annotated, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationInfo,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from alertmap.errors import ValidationError

Severity = Literal["low", "medium", "high", "critical"]
Percent = Annotated[float, Field(ge=0, le=100, allow_inf_nan=False)]

REQUIRED_ALERT_FIELDS = ("title", "description", "category", "severity", "x_position", "y_position", "is_active")

# One year
MAX_EXPIRATION_MINUTES = 525600


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


# --- Auth ---
# Passwords are hashed exactly as typed; only usernames are trimmed
class RegisterRequest(WireModel):
    model_config = ConfigDict(str_strip_whitespace=False)

    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)]
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(WireModel):
    model_config = ConfigDict(str_strip_whitespace=False)

    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    password: str = Field(min_length=1, max_length=128)


# --- Route geometry ---
class RoutePoint(BaseModel):
    x: Percent
    y: Percent


class Route(BaseModel):
    id: Union[str, int]
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(pattern=r"^#[0-9a-fA-F]{3,8}$")
    points: List[RoutePoint] = Field(min_length=2)


_routes_adapter = TypeAdapter(List[Route])


def parse_routes(value):
    return _routes_adapter.validate_python(value)


def dump_routes(routes):
    if not routes:
        return None
    return json.dumps(
        [route.model_dump() for route in routes],
        separators=(",", ":"),
    )


# --- Alerts ---
class AlertFields(WireModel):
    @field_validator("category", check_fields=False)
    @classmethod
    def category_allowed(cls, value, info: ValidationInfo):
        allowed = (info.context or {}).get("categories")
        if value is not None and allowed and value not in allowed:
            raise ValueError(f"must be one of: {', '.join(allowed)}")
        return value

    @field_validator("icon", check_fields=False)
    @classmethod
    def icon_allowed(cls, value, info: ValidationInfo):
        if not value:
            return None
        allowed = (info.context or {}).get("icons")
        if allowed and value not in allowed:
            raise ValueError("unknown icon")
        return value

    @field_validator("alternative_route", check_fields=False)
    @classmethod
    def blank_route_is_none(cls, value):
        return value or None

    @field_validator("alternative_routes", mode="before", check_fields=False)
    @classmethod
    def normalise_routes(cls, value):
        # Accept either the serialised text form or the structured list
        if value is None or value == "":
            return None
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                raise ValueError("must be valid JSON")
        try:
            routes = parse_routes(value)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            where = ".".join(str(part) for part in first["loc"])
            raise ValueError(f"invalid route geometry at {where}: {first['msg']}")
        return dump_routes(routes)


class AlertCreate(AlertFields):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=20)
    severity: Severity
    x_position: Percent
    y_position: Percent
    icon: Optional[str] = Field(None, max_length=50)
    alternative_route: Optional[str] = None
    alternative_routes: Optional[str] = None
    expiration_minutes: Optional[int] = Field(None, ge=0, le=MAX_EXPIRATION_MINUTES)


class AlertUpdate(AlertFields):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1, max_length=20)
    severity: Optional[Severity] = None
    x_position: Optional[Percent] = None
    y_position: Optional[Percent] = None
    icon: Optional[str] = Field(None, max_length=50)
    alternative_route: Optional[str] = None
    alternative_routes: Optional[str] = None
    expiration_minutes: Optional[int] = Field(None, ge=0, le=MAX_EXPIRATION_MINUTES)
    is_active: Optional[bool] = None

    @field_validator(*REQUIRED_ALERT_FIELDS)
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("cannot be null")
        return value


def validation_errors(exc):
    """Flatten pydantic errors to {wireField: message}."""
    errors = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "body"
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


def validate(schema, payload, context=None):
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return schema.model_validate(payload, context=context)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid input", errors=validation_errors(exc))
