"""
Route index models.

Pydantic models mirroring the cached ``.apimap/index.json`` document. Field
names serialize as lower-camel keys; optional fields that are unset are
omitted on write and accepted as missing or null on read.
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


# Only this version is read back; anything else is rejected on load
SCHEMA_VERSION = 1


class RouteKind(str, Enum):
    """Route record category."""

    CONTROLLER = "controller"
    ENDPOINT = "endpoint"


class HttpMethod(str, Enum):
    """HTTP methods a discovered endpoint can carry."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class IndexModel(BaseModel):
    """Base for all index models: camelCase aliases, immutable after load."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ProjectInfo(IndexModel):
    """Metadata about the indexed project."""

    root: str = Field(..., description="Absolute path to the repository root")
    language: str = Field(..., description="Language tag (e.g., 'csharp')")
    framework: str = Field(..., description="Framework tag (e.g., 'aspnet')")


class SourceLocation(IndexModel):
    """Where a route is declared."""

    file: str = Field(..., description="Path relative to the repository root")
    line: int = Field(..., ge=1, description="Line number (1-indexed)")

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


class RouteSymbols(IndexModel):
    """Controller and action names for a route."""

    controller: str
    action: Optional[str] = None


class RouteRecord(IndexModel):
    """
    One discovered controller or endpoint.

    Endpoints always carry an HTTP method and an action; controllers never do.
    """

    id: str = Field(..., min_length=1)
    kind: RouteKind = Field(..., alias="type")
    http_method: Optional[HttpMethod] = None
    path: str = ""
    source: SourceLocation
    symbols: RouteSymbols

    @field_validator("http_method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        """Accept lower-case method names from hand-edited caches"""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("path", mode="before")
    @classmethod
    def null_path_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @model_validator(mode="after")
    def check_kind_fields(self) -> "RouteRecord":
        if self.kind is RouteKind.ENDPOINT:
            if self.http_method is None:
                raise ValueError(f"Endpoint {self.id} has no httpMethod")
            if not self.symbols.action:
                raise ValueError(f"Endpoint {self.id} has no action symbol")
        else:
            if self.http_method is not None:
                raise ValueError(f"Controller {self.id} must not carry httpMethod")
            if self.symbols.action is not None:
                raise ValueError(f"Controller {self.id} must not carry an action symbol")
        return self

    @property
    def is_controller(self) -> bool:
        return self.kind is RouteKind.CONTROLLER

    @property
    def is_endpoint(self) -> bool:
        return self.kind is RouteKind.ENDPOINT

    @property
    def method_name(self) -> Optional[str]:
        """HTTP method as a plain string, or None for controllers"""
        return self.http_method.value if self.http_method else None


class RouteIndex(IndexModel):
    """Root object of the cached route index."""

    version: int
    generated_at: str
    project: ProjectInfo
    routes: Tuple[RouteRecord, ...] = ()

    @model_validator(mode="after")
    def check_unique_ids(self) -> "RouteIndex":
        seen = set()
        for route in self.routes:
            if route.id in seen:
                raise ValueError(f"Duplicate route id: {route.id}")
            seen.add(route.id)
        return self

    @property
    def controllers(self) -> Tuple[RouteRecord, ...]:
        return tuple(r for r in self.routes if r.is_controller)

    @property
    def endpoints(self) -> Tuple[RouteRecord, ...]:
        return tuple(r for r in self.routes if r.is_endpoint)

    def to_document(self) -> Dict[str, Any]:
        """
        Serialize to the on-disk JSON shape.

        Returns:
            Dict with camelCase keys and unset optionals omitted
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "RouteIndex":
        """
        Build an index from the on-disk JSON shape.

        Raises:
            pydantic.ValidationError: If the document violates the model
        """
        return cls.model_validate(data)
