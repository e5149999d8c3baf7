"""
Error taxonomy for the résumé renderer.

Every failure the engine can report carries a machine-readable ``kind`` and a
human-readable message so the HTTP layer can translate it without guessing.
"""

from typing import Dict


class RenderError(Exception):
    kind = "render_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.kind, "detail": self.message}


class ValidationError(RenderError):
    """Caller input rejected before any drawing happens."""
    kind = "validation_error"


class ContentInsufficientError(RenderError):
    """Rendering finished but the document is close to blank."""
    kind = "content_insufficient"


class UpstreamEnhancementError(RenderError):
    """The text-enhancement collaborator failed or returned garbage.

    Always recoverable: callers log it and keep the original text.
    """
    kind = "upstream_enhancement"


class EmitterError(RenderError):
    """Serialization produced an empty or implausibly small PDF."""
    kind = "emitter_error"
