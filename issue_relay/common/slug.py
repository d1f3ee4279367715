"""Repository slug helpers.

GitHub repositories are addressed as ``owner/name`` slugs both in build
substitutions (``REPO_FULL_NAME``) and in delivery configuration. They are
URL path fragments, not filesystem paths, so they are validated here rather
than with ``pathlib``.
"""

from __future__ import annotations


def _invalid(slug: str) -> ValueError:
    return ValueError(f"Invalid repository slug: expected 'owner/name', got {slug!r}")


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Split an ``owner/name`` slug into its parts.

    Raises
    ------
    ValueError
        If the slug does not contain exactly one separator or either side is
        blank.

    Examples
    --------
    >>> parse_repo_slug("acme/widgets")
    ('acme', 'widgets')

    """
    if slug.count("/") != 1:
        raise _invalid(slug)

    owner, name = slug.split("/")
    if not owner.strip() or not name.strip():
        raise _invalid(slug)

    return owner, name


def is_repo_slug(slug: str) -> bool:
    """Return True when ``slug`` is a well-formed ``owner/name`` value."""
    try:
        parse_repo_slug(slug)
    except ValueError:
        return False
    return True
