"""
Per-request parameters threaded explicitly through use cases and repositories.

A RequestContext is built once by the HTTP layer from the query string and
the X-Request-ID header. Search parameters are separate, typed objects whose
fields are Optional[str]: None means "not supplied", "" means "supplied empty".
"""

import math
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from app.application.errors import InvalidRequestContextError, InvalidSearchParamsError

DEFAULT_PAGE_LIMIT = 100
DEFAULT_PAGE = 0


@dataclass(frozen=True)
class RequestContext:
    """
    Pagination and correlation data for one request.

    page is 1-based; page 0 (the fallback) reads the same rows as page 1.
    """

    request_id: str = ""
    limit: int = DEFAULT_PAGE_LIMIT
    page: int = DEFAULT_PAGE

    @classmethod
    def from_query(
        cls,
        request_id: Optional[str],
        limit: Optional[str] = None,
        page: Optional[str] = None,
        default_limit: int = DEFAULT_PAGE_LIMIT,
    ) -> "RequestContext":
        """
        Parse raw query strings, falling back to defaults on bad input.

        Non-positive limits fall back to the default as well, since they
        would make the page count undefined.
        """
        parsed_limit = _parse_int(limit, default_limit)
        if parsed_limit <= 0:
            parsed_limit = default_limit
        parsed_page = _parse_int(page, DEFAULT_PAGE)
        return cls(request_id=request_id or "", limit=parsed_limit, page=parsed_page)

    @property
    def offset(self) -> int:
        return self.limit * max(self.page - 1, 0)

    def page_count(self, total_count: int) -> int:
        """Number of pages needed to show total_count rows at this limit"""
        if total_count <= 0:
            return 0
        return math.ceil(total_count / self.limit)


def _parse_int(raw: Optional[str], default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


class _SearchParams:
    """Shared helpers for the search parameter dataclasses"""

    def supplied(self) -> Dict[str, Any]:
        """Fields the caller actually sent (empty strings included)"""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class UserSearchParams(_SearchParams):
    id: Optional[str] = None
    email: Optional[str] = None
    custom_id: Optional[str] = None
    name: Optional[str] = None
    external_email: Optional[str] = None
    period: Optional[str] = None
    is_enable: Optional[str] = None


@dataclass(frozen=True)
class RoleSearchParams(_SearchParams):
    id: Optional[str] = None
    custom_id: Optional[str] = None
    name: Optional[str] = None
    is_enable: Optional[str] = None
    is_system: Optional[str] = None


def require_context(ctx) -> RequestContext:
    """
    Raises:
        InvalidRequestContextError: If ctx is not a usable RequestContext
    """
    if not isinstance(ctx, RequestContext):
        raise InvalidRequestContextError()
    if ctx.limit <= 0:
        raise InvalidRequestContextError(f"limit must be positive, got {ctx.limit}")
    return ctx


def require_search_params(params, expected: type, flag_fields=("is_enable",)):
    """
    Check search parameters before they reach the repository.

    Raises:
        InvalidSearchParamsError: If params are missing, of the wrong type,
            or carry an unparseable boolean filter
    """
    if params is None or not isinstance(params, expected):
        raise InvalidSearchParamsError()
    for name in flag_fields:
        raw = getattr(params, name)
        if raw is None:
            continue
        try:
            parse_flag(raw)
        except ValueError as e:
            raise InvalidSearchParamsError(str(e))
    return params


def parse_flag(raw: str) -> bool:
    """
    Parse a boolean search filter.

    Raises:
        ValueError: If raw is not one of true/false/1/0 (case-insensitive)
    """
    lowered = raw.strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise ValueError(f"Invalid boolean filter: {raw!r}")
