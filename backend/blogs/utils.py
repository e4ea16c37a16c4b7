import math
import re
import time

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_SPACES = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 297


def slugify_text(text):
    """
    'Hello, World!  Again' -> 'hello-world-again'.

    Lower-cases, drops everything except letters, digits, whitespace and
    hyphens, turns whitespace into hyphens, collapses hyphen runs and trims
    them from both ends.
    """
    slug = _DISALLOWED.sub("", (text or "").lower())
    slug = _SPACES.sub("-", slug.strip())
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def slug_stamp():
    """Numeric suffix taken when a slug is generated (milliseconds since epoch)."""
    return int(time.time() * 1000)


def stamped_slug(text, stamp):
    base = slugify_text(text)
    return f"{base}-{stamp}" if base else str(stamp)


def read_time_minutes(content):
    words = len((content or "").split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def make_excerpt(content):
    content = content or ""
    if len(content) <= EXCERPT_LENGTH:
        return content
    return content[:EXCERPT_LENGTH] + "..."


def normalize_tags(tags):
    """Trim, lower-case and de-duplicate tags, keeping first-seen order."""
    seen = []
    for tag in tags or []:
        tag = str(tag).strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
