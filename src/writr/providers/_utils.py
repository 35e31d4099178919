"""Shared utilities for provider adapters."""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any

from writr.types import StopChunk

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from writr.types import AiStreamChunk

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(image/[^;]+);base64,(.+)$", re.DOTALL)


def parse_base64_image_data_url(url: str) -> tuple[str, str] | None:
    """Return ``(media_type, base64_data)`` for an image data URL, else None."""
    m = _DATA_URL_RE.match(url)
    if m is None:
        return None
    return m.group(1), m.group(2)


def parse_tool_arguments(raw: str | None) -> dict[str, Any]:
    """Parse model-produced tool arguments; malformed JSON degrades to ``{}``."""
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.debug("Discarding malformed tool arguments: %.200s", raw)
        return {}
    return parsed if isinstance(parsed, dict) else {}


async def terminate_stream(
    chunks: AsyncIterator[AiStreamChunk],
) -> AsyncIterator[AiStreamChunk]:
    """Re-yield *chunks* so exactly one StopChunk arrives, last.

    The first stop reported by the provider wins; a stream that ends without
    one gets ``StopChunk("stop")``.
    """
    stop: StopChunk | None = None
    async for chunk in chunks:
        if isinstance(chunk, StopChunk):
            if stop is None:
                stop = chunk
            continue
        yield chunk
    yield stop if stop is not None else StopChunk("stop")
