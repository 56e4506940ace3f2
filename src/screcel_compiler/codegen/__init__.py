"""JavaScript code generation: identifiers, line emission and backends."""

from .emitter import CodeEmitter
from .identifiers import IdentifierRegistry, sanitize

__all__ = ["CodeEmitter", "IdentifierRegistry", "sanitize"]
