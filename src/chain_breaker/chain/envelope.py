"""Response envelope returned by every chain hop."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, model_validator


class ChainEnvelope(BaseModel):
    """Envelope wrapping a hop's result.

    Exactly one of ``data`` and ``error`` is present. ``data`` may hold the
    next hop's own envelope, so a successful chain nests one envelope per hop.
    """

    location: str
    data: Any = None
    error: str | None = None

    @model_validator(mode="after")
    def check_exactly_one_result(self) -> ChainEnvelope:
        has_data = "data" in self.model_fields_set
        has_error = self.error is not None
        if has_data == has_error:
            raise ValueError("exactly one of data or error must be set")
        return self

    @classmethod
    def success(cls, location: str, data: Any) -> ChainEnvelope:
        return cls(location=location, data=data)

    @classmethod
    def failure(cls, location: str, error: str) -> ChainEnvelope:
        return cls(location=location, error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_body(self) -> dict[str, Any]:
        """Serialize, omitting whichever of data/error is absent."""
        if self.is_error:
            return {"location": self.location, "error": self.error}
        return {"location": self.location, "data": self.data}
