from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScriptError(Exception):
    """Failure surfaced to the invoker as a non-zero exit code."""

    message: str
    code: int
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, object]:
        return {"message": self.message, "code": self.code, "kind": self.kind}
