"""
Application layer - use cases and request-scoped parameters.

This layer contains:
- RequestContext and typed search parameters
- One use case class per user/role operation
- Input/output DTOs

No direct dependencies on FastAPI.
"""
