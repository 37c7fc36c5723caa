"""HTTP surface of the session gateway."""

from .errors import register_exception_handlers
from .gate import SessionDependency, require_session
from .routes import router

__all__ = ["SessionDependency", "register_exception_handlers", "require_session", "router"]
