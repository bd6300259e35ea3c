import httpx
import pytest

from solchat.core.errors import UpstreamRejectedError, UpstreamTransientError
from solchat.core.retry import RetryConfig
from solchat.providers.base import HttpProvider
from solchat.providers.solana_rpc import SolanaRpcClient


class DummyProvider(HttpProvider):
    name = "dummy"


class DummyAsyncClient:
    """Stands in for httpx.AsyncClient; replays queued responses."""

    def __init__(self, responses, calls):
        self._responses = responses
        self._calls = calls

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def request(self, method, url, **kwargs):
        self._calls.append((method, url, kwargs))
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def queue(monkeypatch):
    responses = []
    calls = []
    monkeypatch.setattr(
        "solchat.providers.base.httpx.AsyncClient",
        lambda *args, **kwargs: DummyAsyncClient(responses, calls),
    )
    return responses, calls


def _response(status_code, payload=None, text=None, headers=None):
    request = httpx.Request("GET", "https://example.test")
    if text is not None:
        return httpx.Response(status_code, text=text, headers=headers, request=request)
    return httpx.Response(status_code, json=payload, headers=headers, request=request)


NO_WAIT = RetryConfig(max_attempts=3, delay_seconds=0)


@pytest.mark.asyncio
async def test_success_returns_payload(queue):
    responses, calls = queue
    responses.append(_response(200, {"ok": True}))

    payload = await DummyProvider(NO_WAIT)._request_json("GET", "https://example.test/x", params={"a": 1})

    assert payload == {"ok": True}
    assert calls == [("GET", "https://example.test/x", {"params": {"a": 1}})]


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [429, 500, 503])
async def test_rate_limits_and_server_errors_are_transient(queue, status_code):
    responses, _ = queue
    responses.append(_response(status_code, {"error": "busy"}))

    with pytest.raises(UpstreamTransientError) as exc_info:
        await DummyProvider(NO_WAIT)._request_json("GET", "https://example.test")

    assert exc_info.value.status_code == status_code
    assert exc_info.value.provider == "dummy"


@pytest.mark.asyncio
async def test_client_errors_are_rejections_with_detail(queue):
    responses, _ = queue
    responses.append(_response(400, {"error": "Invalid mint"}))

    with pytest.raises(UpstreamRejectedError) as exc_info:
        await DummyProvider(NO_WAIT)._request_json("GET", "https://example.test")

    assert "Invalid mint" in exc_info.value.message


@pytest.mark.asyncio
async def test_error_payload_on_200_is_a_rejection(queue):
    responses, _ = queue
    responses.append(_response(200, {"error": {"message": "Order not found"}}))

    with pytest.raises(UpstreamRejectedError) as exc_info:
        await DummyProvider(NO_WAIT)._request_json("GET", "https://example.test")

    assert "Order not found" in exc_info.value.message


@pytest.mark.asyncio
async def test_error_payload_allowed_when_requested(queue):
    responses, _ = queue
    responses.append(_response(200, {"error": "kept"}))

    payload = await DummyProvider(NO_WAIT)._request_json(
        "GET", "https://example.test", allow_error_payload=True
    )

    assert payload == {"error": "kept"}


@pytest.mark.asyncio
async def test_non_json_body_is_rejected(queue):
    responses, _ = queue
    responses.append(_response(200, text="<html>oops</html>"))

    with pytest.raises(UpstreamRejectedError):
        await DummyProvider(NO_WAIT)._request_json("GET", "https://example.test")


@pytest.mark.asyncio
async def test_network_errors_are_retried_when_enabled(queue):
    responses, calls = queue
    responses.extend([
        httpx.ConnectError("connection refused"),
        _response(503),
        _response(200, {"value": 1}),
    ])

    payload = await DummyProvider(NO_WAIT)._request_json("GET", "https://example.test", retry=True)

    assert payload == {"value": 1}
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_no_retry_by_default(queue):
    responses, calls = queue
    responses.extend([_response(503), _response(200, {"value": 1})])

    with pytest.raises(UpstreamTransientError):
        await DummyProvider(NO_WAIT)._request_json("GET", "https://example.test")

    assert len(calls) == 1


# =============================================================================
# Solana RPC on top of HttpProvider
# =============================================================================

@pytest.mark.asyncio
async def test_rpc_get_balance_reads_lamports(queue):
    responses, calls = queue
    responses.append(_response(200, {"jsonrpc": "2.0", "id": 1, "result": {"value": 2_500_000_000}}))
    rpc = SolanaRpcClient(rpc_url="https://rpc.test", retry_config=NO_WAIT)

    lamports = await rpc.get_balance("9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM")

    assert lamports == 2_500_000_000
    body = calls[0][2]["json"]
    assert body["method"] == "getBalance"
    assert body["params"][0] == "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


@pytest.mark.asyncio
async def test_rpc_error_member_is_a_rejection(queue):
    responses, _ = queue
    responses.append(_response(200, {"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}}))
    rpc = SolanaRpcClient(rpc_url="https://rpc.test", retry_config=NO_WAIT)

    with pytest.raises(UpstreamRejectedError) as exc_info:
        await rpc.get_balance("not-a-key")

    assert exc_info.value.message == "RPC error: Invalid param"


@pytest.mark.asyncio
@pytest.mark.parametrize("header,expected", [("2", 2.0), ("0.5", 0.5), ("Wed, 21 Oct 2015 07:28:00 GMT", None), ("600", None)])
async def test_retry_after_header_is_parsed(queue, header, expected):
    responses, _ = queue
    responses.append(_response(429, {"error": "slow down"}, headers={"Retry-After": header}))

    with pytest.raises(UpstreamTransientError) as exc_info:
        await DummyProvider(NO_WAIT)._request_json("GET", "https://example.test")

    assert exc_info.value.retry_after == expected


@pytest.mark.asyncio
async def test_retry_waits_as_long_as_the_server_asks(queue, monkeypatch):
    responses, calls = queue
    responses.extend([
        _response(429, {"error": "slow down"}, headers={"Retry-After": "4"}),
        _response(200, {"value": 1}),
    ])
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    monkeypatch.setattr("solchat.core.retry.asyncio.sleep", fake_sleep)

    payload = await DummyProvider(NO_WAIT)._request_json("GET", "https://example.test", retry=True)

    assert payload == {"value": 1}
    assert sleeps == [4.0]
    assert len(calls) == 2
