"""Storage locator stage: map an audio URL to its object key in the bucket."""

from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

from speechcoach.errors import MalformedReference


def resolve_object_key(audio_url: str, bucket: str = "speeches") -> str:
    """Return the URL-decoded object key that follows ``/<bucket>/``.

    Public, signed and plain path references all work, e.g.
    ``https://x.supabase.co/storage/v1/object/public/speeches/u1/a%20b.webm``
    resolves to ``u1/a b.webm``. Performs no I/O.
    """

    marker = f"/{bucket}/"

    parts = urlsplit(audio_url)
    if parts.scheme and parts.netloc:
        idx = parts.path.find(marker)
        if idx != -1 and parts.path[idx + len(marker):]:
            return unquote(parts.path[idx + len(marker):])

    match = re.search(re.escape(marker) + r"(.+)$", audio_url)
    if match:
        return unquote(match.group(1))

    raise MalformedReference("Could not parse storage path from audio_url")


__all__ = ["resolve_object_key"]
