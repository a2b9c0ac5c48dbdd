import pytest

from fuse.core.base import (
    NULL_PREIMAGE,
    Amount,
    ChannelPoint,
    Network,
    PaymentResult,
    Unit,
    Vertex,
)
from tests.helpers import pubkey_a


def test_amount_sat_to_msat():
    assert Amount(Unit.sat, 21).to(Unit.msat) == Amount(Unit.msat, 21000)


def test_amount_msat_to_sat_rounding():
    amount = Amount(Unit.msat, 1500)
    assert amount.to(Unit.sat) == Amount(Unit.sat, 1)
    assert amount.to(Unit.sat, round="up") == Amount(Unit.sat, 2)
    assert amount.to_float(Unit.sat) == 1.5


def test_amount_str():
    assert Amount(Unit.sat, 5).str() == "5 sat"
    assert Amount(Unit.msat, 5).str() == "5 msat"


def test_network_currency():
    assert Network("mainnet").bolt11_currency == "bc"
    assert Network.testnet.bolt11_currency == "tb"
    assert Network.regtest.bolt11_currency == "bcrt"
    assert Network.signet.bolt11_currency == "tbs"
    assert Network.simnet.bolt11_currency == "sb"
    with pytest.raises(ValueError):
        Network("litecoin")


def test_vertex_hex_roundtrip():
    vertex = Vertex.from_hex(pubkey_a)
    assert len(vertex.key) == 33
    assert vertex.hex() == pubkey_a
    assert str(vertex) == pubkey_a


def test_vertex_is_a_map_key():
    peers = {Vertex.from_hex(pubkey_a): "a"}
    assert peers[Vertex(bytes.fromhex(pubkey_a))] == "a"


def test_vertex_wrong_length():
    with pytest.raises(ValueError):
        Vertex(b"\x02" * 32)
    with pytest.raises(ValueError):
        Vertex.from_hex("zz")


def test_payment_result_rejects_null_preimage():
    with pytest.raises(ValueError):
        PaymentResult(preimage=NULL_PREIMAGE)
    with pytest.raises(ValueError):
        PaymentResult(preimage=b"\x01" * 31)

    result = PaymentResult(preimage=b"\x01" * 32)
    assert result.paid_fee == Amount(Unit.msat, 0)


def test_channel_point_str():
    point = ChannelPoint(funding_txid=b"\xab" * 32, output_index=1)
    assert str(point) == "ab" * 32 + ":1"
