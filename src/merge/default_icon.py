"""Built-in pack icon used when no input supplies ``pack.png``."""

from __future__ import annotations

import base64

# 1x1 transparent PNG.
DEFAULT_ICON_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
