from __future__ import annotations

import json
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import structlog

log = structlog.get_logger()


async def iter_ndjson(lines: AsyncIterable[str]) -> AsyncIterator[dict[str, Any]]:
    """
    Decode newline-delimited JSON objects.

    Blank lines, lines that are not valid JSON and JSON values that are not
    objects are skipped; a later line can still carry a usable chunk.
    """
    async for line in lines:
        raw = line.strip()
        if not raw:
            continue
        try:
            obj = json.loads(raw)
        except json.JSONDecodeError:
            log.debug("ndjson_line_skipped", line_chars=len(raw))
            continue
        if not isinstance(obj, dict):
            log.debug("ndjson_non_object_skipped")
            continue
        yield obj
