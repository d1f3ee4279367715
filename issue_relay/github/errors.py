"""GitHub REST errors raised by the relay client and resolvers."""

from __future__ import annotations


class GitHubAPIError(RuntimeError):
    """Raised when a GitHub call fails or answers with an unexpected status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def unexpected_status(
        cls, status_code: int, reason: str, url: str
    ) -> GitHubAPIError:
        """Return an error for a response whose status was not expected."""
        return cls(
            f"got a non-OK response status {reason!r} ({status_code}) from {url!r}",
            status_code=status_code,
        )

    @classmethod
    def transport(cls, url: str, detail: str) -> GitHubAPIError:
        """Return an error for a request that never produced a response."""
        return cls(f"failed to make HTTP request to {url!r}: {detail}")


class GitHubResponseShapeError(RuntimeError):
    """Raised when a GitHub response body cannot be decoded."""

    @classmethod
    def undecodable(cls, resource: str, detail: str) -> GitHubResponseShapeError:
        """Return an error for a body matching none of the known shapes."""
        return cls(f"failed to decode {resource} response: {detail}")

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a response missing a required field."""
        return cls(f"GitHub response missing expected field: {field}")


class MissingRefError(LookupError):
    """Raised when a build carries no ``REF_NAME`` substitution."""

    def __init__(self) -> None:
        """Initialise with the fixed message."""
        super().__init__("no ref name found in substitutions")


class GitHubConfigError(ValueError):
    """Raised when the GitHub client configuration is unusable."""

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the token is blank."""
        return cls("GitHub token must be non-empty")
