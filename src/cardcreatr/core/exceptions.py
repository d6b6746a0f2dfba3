from __future__ import annotations

from typing import Any, Dict, Mapping


class CardCreatrError(Exception):
    """Base exception for Card Creatr."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class FieldKeyParseError(CardCreatrError, ValueError):
    """Raised when a mapping key does not start with a field name."""

    def __init__(self, key: str) -> None:
        CardCreatrError.__init__(
            self, f"Cannot parse field with key '{key}'", context={"key": key}
        )


class FieldError(CardCreatrError):
    """Errors tied to one field path of the resolved tree."""

    def __init__(self, message: str, *, path: str, context: Mapping[str, Any] | None = None) -> None:
        ctx = dict(context or {})
        ctx["path"] = path
        super().__init__(message, context=ctx)
        self.path = path


class InconsistentNesting(FieldError):
    """Raised when a field is a mapping in one source and a value in another."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Inconsistent nesting for field with name '{path}'", path=path)


class DuplicateField(FieldError):
    """Raised when one source defines the same non-array field twice."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Duplicate entry in same source for field '{path}'", path=path)


class NumericParseError(FieldError, ValueError):
    """Raised when a ``uint`` or ``number`` field holds an unparsable value."""

    def __init__(self, path: str, value: Any, kind: str) -> None:
        FieldError.__init__(
            self,
            f"Field '{path}' expects {kind}, got {value!r}",
            path=path,
            context={"value": repr(value), "kind": kind},
        )


class FieldNotFound(FieldError, LookupError):
    """Raised when an address lookup into a resolved tree misses."""

    def __init__(self, path: str) -> None:
        FieldError.__init__(self, f"Cannot find field: {path}", path=path)


class AssetLoadError(CardCreatrError, OSError):
    """Raised when the bytes behind a file-backed field cannot be read."""

    def __init__(self, path: str, reason: str = "") -> None:
        message = f"Could not load file: {path}"
        if reason:
            message = f"{message}: {reason}"
        CardCreatrError.__init__(self, message, context={"path": path})
        self.path = path


class AssetDecodeError(CardCreatrError, ValueError):
    """Raised when loaded bytes cannot be decoded as the declared asset type."""

    def __init__(self, path: str, kind: str, reason: str = "") -> None:
        message = f"Could not decode {kind} from {path}"
        if reason:
            message = f"{message}: {reason}"
        CardCreatrError.__init__(self, message, context={"path": path, "kind": kind})
        self.path = path


class LayoutOverflow(CardCreatrError, ValueError):
    """Raised when not a single item fits on the printable area of a sheet."""


class ConfigFormatError(CardCreatrError, ValueError):
    """Raised for unsupported config file types or non-mapping config roots."""


class BundleError(CardCreatrError):
    """Raised for bundle access failures (not loaded, missing entries)."""


class SchemaValidationError(CardCreatrError, ValueError):
    """Raised when a payload fails JSON Schema validation."""


class TemplateRenderError(CardCreatrError):
    """Raised when a card template fails to compile or render."""


__all__ = [
    "CardCreatrError",
    "FieldKeyParseError",
    "FieldError",
    "InconsistentNesting",
    "DuplicateField",
    "NumericParseError",
    "FieldNotFound",
    "AssetLoadError",
    "AssetDecodeError",
    "LayoutOverflow",
    "ConfigFormatError",
    "BundleError",
    "SchemaValidationError",
    "TemplateRenderError",
]
