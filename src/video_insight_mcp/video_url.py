"""YouTube URL validation and video-id helpers."""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

_YOUTUBE_URL_RE = re.compile(
    r"^(https?://)?(www\.)?(youtube\.com/watch\?v=|youtu\.be/)[A-Za-z0-9_-]{11}$"
)


def is_valid_youtube_url(url: str) -> bool:
    """Pre-submission check: canonical watch or short link with an 11-char id."""
    return bool(_YOUTUBE_URL_RE.match(url))


def _is_youtube_host(host: str) -> bool:
    """Check if host is a youtube.com domain (including subdomains like www.youtube.com)."""
    host = host.lower().split(":", 1)[0]
    return host == "youtube.com" or host.endswith(".youtube.com")


def _is_youtu_be_host(host: str) -> bool:
    """Check if host is the youtu.be short-link domain."""
    host = host.lower().split(":", 1)[0]
    return host in ("youtu.be", "www.youtu.be")


def extract_video_id(url: str) -> str | None:
    """Return the video id of a YouTube URL, or None for anything else.

    Handles ``youtu.be/<id>``, ``youtube.com/watch?v=<id>`` and the
    path-based ``/shorts/``, ``/embed/`` and ``/live/`` forms. A missing
    scheme is tolerated, as in :func:`is_valid_youtube_url`.
    """
    url = url.strip().replace("\\", "")
    if "://" not in url:
        url = f"https://{url}"
    parsed = urlparse(url)
    host = parsed.netloc.lower().split(":", 1)[0]

    if _is_youtu_be_host(host):
        vid = parsed.path.strip("/").split("/", 1)[0]
    elif _is_youtube_host(host):
        vid = parse_qs(parsed.query).get("v", [""])[0]
        if not vid:
            parts = [p for p in parsed.path.split("/") if p]
            if len(parts) >= 2 and parts[0] in {"shorts", "embed", "live"}:
                vid = parts[1]
    else:
        return None
    vid = vid.split("&")[0].split("?")[0]
    return vid or None
