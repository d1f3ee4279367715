"""Build event decoding errors."""

from __future__ import annotations


class BuildDecodeError(ValueError):
    """Raised when an inbound message cannot be turned into a build event."""

    @classmethod
    def invalid_envelope(cls, detail: str) -> BuildDecodeError:
        """Return an error for a malformed Pub/Sub push envelope."""
        return cls(f"invalid Pub/Sub push envelope: {detail}")

    @classmethod
    def invalid_build(cls, detail: str) -> BuildDecodeError:
        """Return an error for a message whose data is not a Cloud Build."""
        return cls(f"invalid Cloud Build payload: {detail}")
