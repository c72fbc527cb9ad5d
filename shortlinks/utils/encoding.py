from typing import Optional

from nanoid import generate
from nanoid.resources import alphabet

from shortlinks.core.config import settings

# nanoid's URL-safe alphabet: "_-", digits, lower and upper case letters (64 symbols)
ALPHABET = alphabet

# Paths served by the health router; a shortlink equal to one of them could never redirect
RESERVED_SHORTLINKS = frozenset({"health", "ready"})


def generate_short_id(size: Optional[int] = None) -> str:
    """Generate a random URL-safe short id. Uniqueness is not checked here."""
    return generate(alphabet=ALPHABET, size=size or settings.SHORT_ID_LENGTH)
