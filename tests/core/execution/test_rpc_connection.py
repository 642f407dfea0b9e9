"""
Tests for the JSON-RPC NetworkConnection against a mocked transport.
"""

import asyncio
import json

import httpx
import pytest

from keeper.core.execution import Block, NetworkConnection, RpcError

GWEI = 10**9


def make_connection(results, seen=None, priority_fee_wei=1_500_000_000):
    """results maps method -> result, or -> callable(params) for dynamic answers."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method = body["method"]
        if seen is not None:
            seen.append(method)
        answer = results[method]
        if callable(answer):
            answer = answer(body["params"])
        if isinstance(answer, dict) and "error" in answer:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **answer})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": answer})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NetworkConnection(
        "http://node.local", priority_fee_wei=priority_fee_wei, client=client
    )


@pytest.mark.asyncio
async def test_ready_detects_chain_once():
    seen = []
    conn = make_connection({"eth_chainId": "0x89"}, seen)

    assert await conn.ready() == 137
    assert await conn.ready() == 137
    assert conn.chain_id == 137
    assert seen == ["eth_chainId"]


def test_chain_id_requires_ready():
    conn = make_connection({})
    with pytest.raises(RuntimeError):
        conn.chain_id


@pytest.mark.asyncio
async def test_fee_data_on_eip1559_network():
    conn = make_connection(
        {
            "eth_getBlockByNumber": {"number": "0x10", "baseFeePerGas": hex(7 * GWEI)},
            "eth_gasPrice": hex(9 * GWEI),
        }
    )

    block = await conn.get_block()
    fee_data = await conn.get_fee_data()

    assert block.number == 16
    assert block.supports_eip1559
    assert fee_data.gas_price == 9 * GWEI
    assert fee_data.max_priority_fee_per_gas == 1_500_000_000
    assert fee_data.max_fee_per_gas == 14 * GWEI + 1_500_000_000


@pytest.mark.asyncio
async def test_fee_data_on_legacy_network():
    conn = make_connection(
        {
            "eth_getBlockByNumber": {"number": "0x10", "baseFeePerGas": None},
            "eth_gasPrice": hex(5 * GWEI),
        }
    )

    block = await conn.get_block()
    fee_data = await conn.get_fee_data()

    assert not block.supports_eip1559
    assert fee_data.gas_price == 5 * GWEI
    assert fee_data.max_fee_per_gas is None
    assert fee_data.max_priority_fee_per_gas is None


@pytest.mark.asyncio
async def test_account_reads_use_latest_block():
    params = {}

    def count(p):
        params["count"] = p
        return "0x2a"

    conn = make_connection({"eth_getTransactionCount": count, "eth_getBalance": hex(10**18)})

    assert await conn.get_transaction_count("0xabc") == 42
    assert await conn.get_balance("0xabc") == 10**18
    assert params["count"] == ["0xabc", "latest"]


@pytest.mark.asyncio
async def test_rpc_error_payload_raises():
    conn = make_connection(
        {"eth_sendRawTransaction": {"error": {"code": -32000, "message": "nonce too low"}}}
    )

    with pytest.raises(RpcError) as exc:
        await conn.send_raw_transaction("0x00")

    assert exc.value.method == "eth_sendRawTransaction"
    assert "nonce too low" in str(exc.value)


@pytest.mark.asyncio
async def test_wait_for_transaction_polls_until_mined():
    receipts = iter([None, None, {"blockNumber": "0x65", "status": "0x1"}])
    seen = []
    conn = make_connection({"eth_getTransactionReceipt": lambda _p: next(receipts)}, seen)

    receipt = await conn.wait_for_transaction("0xhash", poll_interval=0)

    assert receipt["status"] == "0x1"
    assert seen.count("eth_getTransactionReceipt") == 3


@pytest.mark.asyncio
async def test_wait_for_transaction_counts_confirmations():
    heads = iter(["0x65", "0x66"])
    conn = make_connection(
        {
            "eth_getTransactionReceipt": {"blockNumber": "0x65", "status": "0x1"},
            "eth_blockNumber": lambda _p: next(heads),
        }
    )

    receipt = await conn.wait_for_transaction("0xhash", confirmations=2, poll_interval=0)

    assert receipt["blockNumber"] == "0x65"


@pytest.mark.asyncio
async def test_wait_for_transaction_times_out():
    conn = make_connection({"eth_getTransactionReceipt": None})

    with pytest.raises(asyncio.TimeoutError):
        await conn.wait_for_transaction("0xhash", poll_interval=0.01, timeout=0.05)


@pytest.mark.asyncio
async def test_wait_for_transaction_survives_failed_polls():
    answers = iter(
        [
            httpx.Response(502, text="Bad Gateway"),
            {"error": {"code": -32603, "message": "header not found"}},
            None,
            {"blockNumber": "0x65", "status": "0x1"},
        ]
    )
    polls = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        polls.append(body["method"])
        answer = next(answers)
        if isinstance(answer, httpx.Response):
            return answer
        if isinstance(answer, dict) and "error" in answer:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **answer})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": answer})

    conn = NetworkConnection(
        "http://node.local", client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )

    receipt = await conn.wait_for_transaction("0xhash", poll_interval=0)

    assert receipt["blockNumber"] == "0x65"
    assert polls == ["eth_getTransactionReceipt"] * 4


@pytest.mark.asyncio
async def test_wait_for_transaction_times_out_while_node_is_down():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    conn = NetworkConnection(
        "http://node.local", client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )

    with pytest.raises(asyncio.TimeoutError):
        await conn.wait_for_transaction("0xhash", poll_interval=0.01, timeout=0.05)


@pytest.mark.asyncio
async def test_fee_data_prices_a_given_block_without_refetching():
    seen = []
    conn = make_connection({"eth_gasPrice": hex(9 * GWEI)}, seen)

    fee_data = await conn.get_fee_data(Block(number=16, base_fee_per_gas=3 * GWEI))

    assert fee_data.max_fee_per_gas == 6 * GWEI + 1_500_000_000
    assert seen == ["eth_gasPrice"]
