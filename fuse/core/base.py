import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# ------- AMOUNTS -------


class Unit(Enum):
    sat = 0
    msat = 1

    def str(self, amount: int) -> str:
        if self == Unit.sat:
            return f"{amount} sat"
        elif self == Unit.msat:
            return f"{amount} msat"
        else:
            raise Exception("Invalid unit")

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Amount:
    unit: Unit
    amount: int

    def to(self, to_unit: Unit, round: Optional[str] = None) -> "Amount":
        if self.unit == to_unit:
            return self

        if self.unit == Unit.sat:
            return Amount(to_unit, self.amount * 1000)
        # msat -> sat
        if round == "up":
            return Amount(to_unit, math.ceil(self.amount / 1000))
        return Amount(to_unit, self.amount // 1000)

    def to_float(self, to_unit: Unit = Unit.sat) -> float:
        """Amount expressed in `to_unit` without rounding, e.g. 1500 msat -> 1.5 sat."""
        if self.unit == to_unit:
            return float(self.amount)
        if self.unit == Unit.msat:
            return self.amount / 1000
        return float(self.amount * 1000)

    def str(self) -> str:
        return self.unit.str(self.amount)

    def __repr__(self):
        return self.unit.str(self.amount)


# ------- NETWORK -------


class Network(str, Enum):
    mainnet = "mainnet"
    testnet = "testnet"
    regtest = "regtest"
    simnet = "simnet"
    signet = "signet"

    @property
    def bolt11_currency(self) -> str:
        """Human readable part following `ln` in a payment request."""
        return BOLT11_CURRENCIES[self]

    def __str__(self):
        return self.value


BOLT11_CURRENCIES = {
    Network.mainnet: "bc",
    Network.testnet: "tb",
    Network.regtest: "bcrt",
    Network.simnet: "sb",
    Network.signet: "tbs",
}


# ------- NODE IDENTITY -------

VERTEX_SIZE = 33


@dataclass(frozen=True)
class Vertex:
    """Compressed secp256k1 public key identifying a node."""

    key: bytes

    def __post_init__(self):
        if len(self.key) != VERTEX_SIZE:
            raise ValueError(
                f"vertex must be {VERTEX_SIZE} bytes, got {len(self.key)}"
            )

    @classmethod
    def from_hex(cls, pubkey: str) -> "Vertex":
        try:
            return cls(bytes.fromhex(pubkey))
        except ValueError as e:
            raise ValueError(f"invalid pubkey {pubkey!r}: {e}")

    def hex(self) -> str:
        return self.key.hex()

    def __str__(self):
        return self.hex()


# ------- INVOICES AND PAYMENTS -------


@dataclass(frozen=True)
class Invoice:
    encoded: str
    network: Network
    payment_hash: bytes
    amount: Optional[Amount] = None  # msat, None for amountless requests
    description: Optional[str] = None
    description_hash: Optional[bytes] = None
    payee: Optional[Vertex] = None
    timestamp: int = 0
    expiry: int = 3600


PREIMAGE_SIZE = 32
NULL_PREIMAGE = bytes(PREIMAGE_SIZE)


@dataclass(frozen=True)
class PaymentResult:
    preimage: bytes
    paid_fee: Amount = field(default_factory=lambda: Amount(Unit.msat, 0))

    def __post_init__(self):
        if len(self.preimage) != PREIMAGE_SIZE:
            raise ValueError(f"preimage must be {PREIMAGE_SIZE} bytes")
        if self.preimage == NULL_PREIMAGE:
            raise ValueError("null preimage is not a proof of payment")


# ------- PEERS AND CHANNELS -------


@dataclass(frozen=True)
class Peer:
    address: str
    inbound: bool
    ping_time: int  # microseconds
    pubkey: Vertex
    sent: Amount
    received: Amount


@dataclass(frozen=True)
class Channel:
    id: int
    local_balance: Amount
    remote_balance: Amount
    capacity: Amount
    active: bool
    private: bool
    remote_pubkey: Vertex


@dataclass(frozen=True)
class ChannelPoint:
    funding_txid: bytes  # display (big endian) order
    output_index: int

    def __str__(self):
        return f"{self.funding_txid.hex()}:{self.output_index}"
