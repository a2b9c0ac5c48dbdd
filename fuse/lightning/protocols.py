from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from ..core.base import Amount, Unit

# ------- LND RECORDS -------


@dataclass
class WalletBalance:
    confirmed: Amount
    unconfirmed: Amount


@dataclass
class AddInvoiceData:
    value: Amount
    memo: str = ""
    description_hash: Optional[bytes] = None
    expiry: Optional[int] = None


@dataclass
class LndPaymentResult:
    """Outcome of a payment as reported by the node.

    `error` is set when the node reports the payment failed, in which case
    there is usually no preimage. A succeeded payment carries the preimage,
    which is all zeros if the node did not actually pay anything.
    """

    preimage: bytes = b""
    paid_fee: Amount = Amount(Unit.msat, 0)
    paid_amount: Amount = Amount(Unit.msat, 0)
    error: Optional[Exception] = None


@dataclass
class LndPeer:
    pubkey: bytes
    address: str
    inbound: bool = False
    ping_time: int = 0
    sent: Amount = Amount(Unit.sat, 0)
    received: Amount = Amount(Unit.sat, 0)


@dataclass
class LndChannelInfo:
    channel_id: int
    pubkey_bytes: bytes
    capacity: Amount
    local_balance: Amount
    remote_balance: Amount
    active: bool = False
    private: bool = False


@dataclass
class OutPoint:
    hash: bytes  # display (big endian) order
    index: int


# ------- LND CONTRACT -------


class Lnd(Protocol):
    """Subset of an LND node's RPC surface the lightning provider consumes."""

    async def wallet_balance(self) -> WalletBalance: ...

    async def add_invoice(self, data: AddInvoiceData) -> Tuple[bytes, str]:
        """Returns the payment hash and the encoded payment request."""
        ...

    async def pay_invoice(
        self, invoice: str, max_fee: Amount, outgoing_channel: Optional[int]
    ) -> LndPaymentResult: ...

    async def connect(self, peer: bytes, host: str, permanent: bool) -> None: ...

    async def list_peers(self) -> List[LndPeer]: ...

    async def open_channel(
        self, peer: bytes, local_sat: Amount, push_sat: Amount, private: bool
    ) -> OutPoint: ...

    async def list_channels(
        self, active_only: bool, public_only: bool
    ) -> List[LndChannelInfo]: ...

    async def close(self) -> None: ...
