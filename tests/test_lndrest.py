import base64
import json

import httpx
import pytest
import respx
from httpx import Response

from fuse.core.base import Amount, Network, Unit
from fuse.core.errors import BackendConnectionError, LndRpcError
from fuse.lightning.lndrest import LndRestNode
from fuse.lightning.macaroon import load_macaroon
from fuse.lightning.protocols import AddInvoiceData
from tests.helpers import payment_request, pubkey_a

ENDPOINT = "https://lnd.test:8080"
MACAROON = "0201036c6e64"

getinfo = {
    "identity_pubkey": pubkey_a,
    "alias": "alice",
    "version": "0.18.0-beta",
    "chains": [{"chain": "bitcoin", "network": "regtest"}],
}


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


@pytest.fixture
def node() -> LndRestNode:
    return LndRestNode("lnd.test:8080", Network.regtest, MACAROON, tls_verify=False)


def test_endpoint_and_macaroon_header(node: LndRestNode):
    assert node.endpoint == ENDPOINT
    assert node.client.headers["Grpc-Metadata-macaroon"] == MACAROON


def test_requires_address_and_macaroon():
    with pytest.raises(BackendConnectionError, match="no address"):
        LndRestNode("", Network.regtest, MACAROON)
    with pytest.raises(BackendConnectionError, match="no macaroon"):
        LndRestNode("lnd.test:8080", Network.regtest, "")


@respx.mock
@pytest.mark.asyncio
async def test_create_checks_network():
    respx.get(f"{ENDPOINT}/v1/getinfo").mock(return_value=Response(200, json=getinfo))
    node = await LndRestNode.create("lnd.test:8080", "regtest", MACAROON)
    assert node.network == Network.regtest
    await node.close()


@respx.mock
@pytest.mark.asyncio
async def test_create_network_mismatch():
    respx.get(f"{ENDPOINT}/v1/getinfo").mock(return_value=Response(200, json=getinfo))
    with pytest.raises(BackendConnectionError, match="expected mainnet"):
        await LndRestNode.create("lnd.test:8080", "mainnet", MACAROON)


@respx.mock
@pytest.mark.asyncio
async def test_create_unreachable():
    respx.get(f"{ENDPOINT}/v1/getinfo").mock(
        side_effect=httpx.ConnectError("connection refused")
    )
    with pytest.raises(BackendConnectionError, match="Unable to connect"):
        await LndRestNode.create("lnd.test:8080", "regtest", MACAROON)


@respx.mock
@pytest.mark.asyncio
async def test_wallet_balance(node: LndRestNode):
    respx.get(f"{ENDPOINT}/v1/balance/blockchain").mock(
        return_value=Response(
            200,
            json={
                "total_balance": "1500",
                "confirmed_balance": "1000",
                "unconfirmed_balance": "500",
            },
        )
    )
    balance = await node.wallet_balance()
    assert balance.confirmed == Amount(Unit.sat, 1000)
    assert balance.unconfirmed == Amount(Unit.sat, 500)


@respx.mock
@pytest.mark.asyncio
async def test_rpc_error_message(node: LndRestNode):
    respx.get(f"{ENDPOINT}/v1/balance/blockchain").mock(
        return_value=Response(
            500, json={"code": 2, "message": "wallet locked", "details": []}
        )
    )
    with pytest.raises(LndRpcError, match="wallet locked") as exc:
        await node.wallet_balance()
    assert exc.value.status_code == 500


@respx.mock
@pytest.mark.asyncio
async def test_add_invoice_with_description_hash(node: LndRestNode):
    route = respx.post(f"{ENDPOINT}/v1/invoices").mock(
        return_value=Response(
            200,
            json={"r_hash": b64(b"\x01" * 32), "payment_request": payment_request},
        )
    )
    payment_hash, encoded = await node.add_invoice(
        AddInvoiceData(
            value=Amount(Unit.sat, 1000), memo="", description_hash=b"\x02" * 32
        )
    )
    assert payment_hash == b"\x01" * 32
    assert encoded == payment_request

    body = json.loads(route.calls.last.request.content)
    assert body["value_msat"] == "1000000"
    assert body["description_hash"] == b64(b"\x02" * 32)
    assert "memo" not in body


@respx.mock
@pytest.mark.asyncio
async def test_add_invoice_with_memo(node: LndRestNode):
    route = respx.post(f"{ENDPOINT}/v1/invoices").mock(
        return_value=Response(
            200,
            json={"r_hash": b64(b"\x01" * 32), "payment_request": payment_request},
        )
    )
    await node.add_invoice(AddInvoiceData(value=Amount(Unit.msat, 1500), memo="hi"))
    body = json.loads(route.calls.last.request.content)
    assert body == {"value_msat": "1500", "memo": "hi"}


@respx.mock
@pytest.mark.asyncio
async def test_pay_invoice(node: LndRestNode):
    route = respx.post(f"{ENDPOINT}/v1/channels/transactions").mock(
        return_value=Response(
            200,
            json={
                "payment_error": "",
                "payment_preimage": b64(b"\x05" * 32),
                "payment_hash": b64(b"\x06" * 32),
                "payment_route": {
                    "total_fees_msat": "2000",
                    "total_amt_msat": "1002000",
                },
            },
        )
    )
    result = await node.pay_invoice(payment_request, Amount(Unit.sat, 10), None)
    assert result.error is None
    assert result.preimage == b"\x05" * 32
    assert result.paid_fee == Amount(Unit.msat, 2000)
    assert result.paid_amount == Amount(Unit.msat, 1002000)

    body = json.loads(route.calls.last.request.content)
    assert body["fee_limit"] == {"fixed_msat": "10000"}
    assert "outgoing_chan_id" not in body


@respx.mock
@pytest.mark.asyncio
async def test_pay_invoice_payment_error(node: LndRestNode):
    respx.post(f"{ENDPOINT}/v1/channels/transactions").mock(
        return_value=Response(200, json={"payment_error": "no route"})
    )
    result = await node.pay_invoice(payment_request, Amount(Unit.sat, 10), None)
    assert isinstance(result.error, LndRpcError)
    assert str(result.error) == "no route"


@respx.mock
@pytest.mark.asyncio
async def test_pay_invoice_empty_preimage(node: LndRestNode):
    respx.post(f"{ENDPOINT}/v1/channels/transactions").mock(
        return_value=Response(200, json={"payment_error": "", "payment_preimage": ""})
    )
    result = await node.pay_invoice(payment_request, Amount(Unit.sat, 10), None)
    assert result.error is None
    assert result.preimage == bytes(32)


@respx.mock
@pytest.mark.asyncio
async def test_pay_invoice_transport_error(node: LndRestNode):
    respx.post(f"{ENDPOINT}/v1/channels/transactions").mock(
        side_effect=httpx.ConnectError("connection reset")
    )
    result = await node.pay_invoice(payment_request, Amount(Unit.sat, 10), 123)
    assert isinstance(result.error, httpx.ConnectError)


@respx.mock
@pytest.mark.asyncio
async def test_connect_peer(node: LndRestNode):
    route = respx.post(f"{ENDPOINT}/v1/peers").mock(return_value=Response(200, json={}))
    await node.connect(bytes.fromhex(pubkey_a), "10.0.0.1:9735", permanent=True)
    body = json.loads(route.calls.last.request.content)
    assert body == {"addr": {"pubkey": pubkey_a, "host": "10.0.0.1:9735"}, "perm": True}


@respx.mock
@pytest.mark.asyncio
async def test_list_peers(node: LndRestNode):
    respx.get(f"{ENDPOINT}/v1/peers").mock(
        return_value=Response(
            200,
            json={
                "peers": [
                    {
                        "pub_key": pubkey_a,
                        "address": "10.0.0.1:9735",
                        "bytes_sent": "100",
                        "bytes_recv": "200",
                        "sat_sent": "3",
                        "sat_recv": "4",
                        "inbound": True,
                        "ping_time": "1500",
                    }
                ]
            },
        )
    )
    peers = await node.list_peers()
    assert len(peers) == 1
    assert peers[0].pubkey == bytes.fromhex(pubkey_a)
    assert peers[0].inbound
    assert peers[0].ping_time == 1500
    assert peers[0].sent == Amount(Unit.sat, 3)
    assert peers[0].received == Amount(Unit.sat, 4)


@respx.mock
@pytest.mark.asyncio
async def test_open_channel_txid_byte_order(node: LndRestNode):
    txid_internal = bytes(range(32))
    route = respx.post(f"{ENDPOINT}/v1/channels").mock(
        return_value=Response(
            200,
            json={"funding_txid_bytes": b64(txid_internal), "output_index": 1},
        )
    )
    outpoint = await node.open_channel(
        bytes.fromhex(pubkey_a), Amount(Unit.sat, 20_000), Amount(Unit.sat, 0), True
    )
    assert outpoint.hash == txid_internal[::-1]
    assert outpoint.index == 1

    body = json.loads(route.calls.last.request.content)
    assert body["node_pubkey"] == b64(bytes.fromhex(pubkey_a))
    assert body["local_funding_amount"] == "20000"
    assert body["push_sat"] == "0"
    assert body["private"] is True


@respx.mock
@pytest.mark.asyncio
async def test_list_channels(node: LndRestNode):
    route = respx.get(f"{ENDPOINT}/v1/channels").mock(
        return_value=Response(
            200,
            json={
                "channels": [
                    {
                        "chan_id": "123456789",
                        "remote_pubkey": pubkey_a,
                        "capacity": "100000",
                        "local_balance": "60000",
                        "remote_balance": "39000",
                        "active": True,
                        "private": False,
                    }
                ]
            },
        )
    )
    channels = await node.list_channels(active_only=True, public_only=False)
    assert route.calls.last.request.url.params["active_only"] == "true"
    assert route.calls.last.request.url.params["public_only"] == "false"
    assert len(channels) == 1
    channel = channels[0]
    assert channel.channel_id == 123456789
    assert channel.pubkey_bytes == bytes.fromhex(pubkey_a)
    assert channel.capacity == Amount(Unit.sat, 100000)
    assert channel.local_balance == Amount(Unit.sat, 60000)
    assert channel.remote_balance == Amount(Unit.sat, 39000)
    assert channel.active and not channel.private


@respx.mock
@pytest.mark.asyncio
async def test_list_channels_empty(node: LndRestNode):
    respx.get(f"{ENDPOINT}/v1/channels").mock(
        return_value=Response(200, json={"channels": []})
    )
    assert await node.list_channels(False, False) == []


def test_load_macaroon(tmp_path):
    path = tmp_path / "admin.macaroon"
    path.write_bytes(b"\x02\x01")
    assert load_macaroon(str(path)) == "0201"
    assert load_macaroon("0201") == "0201"
    assert load_macaroon(b64(b"\x02\x01")) == "0201"
    with pytest.raises(BackendConnectionError, match="not found"):
        load_macaroon(str(tmp_path / "missing.macaroon"))
