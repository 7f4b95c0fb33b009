from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..passes.model import VisitorPass


@dataclass(frozen=True)
class VisitorCheckResult:
    """Outcome of looking up a returning visitor by name and/or phone."""

    exists: bool
    phone_match: bool
    message: str
    visitor: Optional[VisitorPass] = None
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "exists": self.exists,
            "phoneMatch": self.phone_match,
            "message": self.message,
            "visitor": self.visitor.to_dict() if self.visitor else None,
            "suggestions": list(self.suggestions),
        }
