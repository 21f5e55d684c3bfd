import pytest

from legal_gateway.streaming import iter_ndjson


async def _lines(*items: str):
    for item in items:
        yield item


@pytest.mark.asyncio
async def test_iter_ndjson_skips_blank_malformed_and_non_object_lines():
    out = []
    async for obj in iter_ndjson(
        _lines('{"response":"a","done":false}', "", "{not json", "[1, 2]", '  {"response":"b","done":true}  ')
    ):
        out.append(obj)
    assert out == [{"response": "a", "done": False}, {"response": "b", "done": True}]
