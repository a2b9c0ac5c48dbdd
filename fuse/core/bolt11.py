from typing import Union

import bolt11
from bolt11 import Bolt11Exception

from .base import Amount, Invoice, Network, Unit, Vertex
from .errors import InvoiceDecodeError

# BOLT-11: expiry defaults to one hour when the `x` field is absent
DEFAULT_EXPIRY = 3600


def decode_invoice(encoded: str, network: Union[Network, str]) -> Invoice:
    """Decode a BOLT-11 payment request and check it belongs to `network`.

    Raises InvoiceDecodeError if the request is malformed, its signature or
    checksum is invalid, `network` is not a known network, or the request was
    issued for another network.
    """
    try:
        network = Network(network)
    except ValueError:
        raise InvoiceDecodeError(f"unknown network: {network}")

    try:
        obj = bolt11.decode(encoded)
    except Bolt11Exception as exc:
        raise InvoiceDecodeError(f"invalid payment request: {exc}")
    except (ValueError, TypeError, IndexError) as exc:
        raise InvoiceDecodeError(f"malformed payment request: {exc}")

    if obj.currency != network.bolt11_currency:
        raise InvoiceDecodeError(
            f"invoice is for network '{obj.currency}', expected"
            f" '{network.bolt11_currency}' ({network})"
        )

    if not obj.payment_hash:
        raise InvoiceDecodeError("payment request has no payment hash")

    return Invoice(
        encoded=encoded,
        network=network,
        payment_hash=bytes.fromhex(obj.payment_hash),
        amount=(
            Amount(Unit.msat, int(obj.amount_msat))
            if obj.amount_msat is not None
            else None
        ),
        description=obj.description,
        description_hash=(
            bytes.fromhex(obj.description_hash) if obj.description_hash else None
        ),
        payee=Vertex.from_hex(obj.payee) if obj.payee else None,
        timestamp=obj.date,
        expiry=obj.expiry or DEFAULT_EXPIRY,
    )
