import re
import secrets
import string
from typing import Awaitable, Callable, Optional

from crm_service.domain.constants import SLUG_MAX_ATTEMPTS, SLUG_RANDOM_SUFFIX_LENGTH

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def slugify(name: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim hyphens."""
    slug = _NON_ALNUM.sub("-", name.strip().lower()).strip("-")
    return slug or "organization"


def random_suffix(length: int = SLUG_RANDOM_SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


async def generate_unique_slug(
    name: str,
    slug_exists: Callable[[str], Awaitable[bool]],
    max_attempts: int = SLUG_MAX_ATTEMPTS,
) -> Optional[str]:
    """
    Try the plain slug, then up to max_attempts suffixed variants.

    Returns None when every candidate is taken.
    """
    base = slugify(name)
    if not await slug_exists(base):
        return base

    for _ in range(max_attempts):
        candidate = f"{base}-{random_suffix()}"
        if not await slug_exists(candidate):
            return candidate

    return None
