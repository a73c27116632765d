"""Effect image extraction from a chat-completions reply.

Chat completions carry no dedicated image output, so the reply text is
searched for an inline ``data:image/...;base64,`` URI (bare or inside a
markdown image). Replies without one get a rendered SVG card showing the
model's answer.
"""

from __future__ import annotations

import base64
import html
import re

_DATA_URI_PATTERN = re.compile(r"data:image/[A-Za-z0-9.+-]+;base64,[A-Za-z0-9+/]+={0,2}")

_PLACEHOLDER_MAX_CHARS = 120

_SVG_TEMPLATE = (
    "<svg width='400' height='400' xmlns='http://www.w3.org/2000/svg'>"
    "<rect width='400' height='400' fill='#3373dc'/>"
    "<text x='50%' y='50%' dominant-baseline='middle' text-anchor='middle' "
    "font-family='monospace' font-size='16px' fill='white'>{label}</text>"
    "</svg>"
)


def find_data_uri(content: str) -> str | None:
    match = _DATA_URI_PATTERN.search(content)
    return match.group(0) if match else None


def render_placeholder(content: str) -> str:
    label = " ".join(content.split())[:_PLACEHOLDER_MAX_CHARS] or "AI Processed"
    svg = _SVG_TEMPLATE.format(label=html.escape(label, quote=True))
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def extract_effect_image(content: str, origin_image: str | None = None) -> str:
    """Return the image produced by the model, or a rendered placeholder.

    An inline image identical to the origin (the model echoing its input) does
    not count as a result.
    """
    found = find_data_uri(content)
    if found and found != origin_image:
        return found
    return render_placeholder(content)
