"""HTML and text sanitization applied around the extraction chain."""

from __future__ import annotations

import re

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
_BLANK_LINES_RE = re.compile(r"\n\s*\n")


def sanitize_html(html: str) -> str:
    """Strip ``<script>``/``<style>`` blocks and comments, collapse whitespace."""
    html = _SCRIPT_RE.sub("", html)
    html = _STYLE_RE.sub("", html)
    html = _COMMENT_RE.sub("", html)
    return _WHITESPACE_RE.sub(" ", html).strip()


def sanitize_content(text: str) -> str:
    """Normalize extracted body text into a single clean line.

    Non-printable characters are dropped (whitespace is kept so it can be
    collapsed), then every whitespace run becomes a single space.  The
    result is a fixpoint: ``sanitize_content(sanitize_content(t)) ==
    sanitize_content(t)``.
    """
    text = _BLANK_LINES_RE.sub("\n", text)
    text = "".join(ch for ch in text if ch.isprintable() or ch.isspace())
    return _WHITESPACE_RE.sub(" ", text).strip()
