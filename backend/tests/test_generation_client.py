import json

import httpx
import pytest

from conftest import make_generation_client
from docgen.exceptions import GenerationServiceError


@pytest.mark.asyncio
async def test_generate_posts_payload_and_returns_body():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["payload"] = json.loads(request.content)
        seen["content_type"] = request.headers["content-type"]
        return httpx.Response(200, text="<h1>Doc</h1>")

    body = await make_generation_client(handler).generate({"prompt": "p", "style": "memo"})

    assert body == "<h1>Doc</h1>"
    assert seen["method"] == "POST"
    assert seen["url"] == "http://generator.test/generate"
    assert seen["payload"] == {"prompt": "p", "style": "memo"}
    assert seen["content_type"] == "application/json"


@pytest.mark.asyncio
async def test_non_success_status_raises():
    client = make_generation_client(lambda request: httpx.Response(503, text="busy"))

    with pytest.raises(GenerationServiceError) as exc:
        await client.generate({"prompt": "p"})
    assert exc.value.message == "Server responded with status: 503"


@pytest.mark.asyncio
async def test_timeout_raises_generation_error():
    def handler(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(GenerationServiceError) as exc:
        await make_generation_client(handler).generate({"prompt": "p"})
    assert "timed out" in exc.value.message


@pytest.mark.asyncio
async def test_transport_error_raises_generation_error():
    def handler(request):
        raise httpx.ConnectError("name resolution failed", request=request)

    with pytest.raises(GenerationServiceError) as exc:
        await make_generation_client(handler).generate({"prompt": "p"})
    assert "name resolution failed" in exc.value.message
