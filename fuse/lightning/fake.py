import hashlib
from datetime import datetime
from os import urandom
from typing import Dict, List, Optional, Set, Tuple, Union

from bolt11 import (
    Bolt11,
    Feature,
    Features,
    FeatureState,
    MilliSatoshi,
    TagChar,
    Tags,
    decode,
    encode,
)
from loguru import logger

from ..core.base import NULL_PREIMAGE, Amount, Network, Unit
from ..core.errors import LndRpcError
from .protocols import (
    AddInvoiceData,
    LndChannelInfo,
    LndPaymentResult,
    LndPeer,
    OutPoint,
    WalletBalance,
)


class FakeLnd:
    """In-memory stand-in for an LND node.

    Invoices are real, signed BOLT-11 requests for the configured network.
    Paying an invoice a second time behaves like LND does: no error, but an
    all-zero preimage.
    """

    secret: str = "FAKELND SECRET"
    privkey: str = hashlib.pbkdf2_hmac(
        "sha256",
        secret.encode(),
        b"FakeLnd",
        2048,
        32,
    ).hex()

    def __init__(
        self,
        network: Union[Network, str] = Network.regtest,
        confirmed_balance: int = 1337,
        unconfirmed_balance: int = 42,
        routing_fee_msat: int = 1000,
    ):
        self.network = Network(network)
        self.balance = WalletBalance(
            confirmed=Amount(Unit.sat, confirmed_balance),
            unconfirmed=Amount(Unit.sat, unconfirmed_balance),
        )
        self.routing_fee = Amount(Unit.msat, routing_fee_msat)
        self.preimages: Dict[str, bytes] = {}
        self.created_invoices: List[AddInvoiceData] = []
        self.paid_invoices: Set[str] = set()
        self.peers: Dict[bytes, LndPeer] = {}
        self.permanent_peers: Set[bytes] = set()
        self.channels: List[LndChannelInfo] = []
        self.closed = False

    @classmethod
    async def create(
        cls,
        address: Optional[str],
        network: Union[Network, str],
        macaroon_path: Optional[str] = None,
        tls_path: Optional[str] = None,
    ) -> "FakeLnd":
        logger.warning("Using FakeLnd, no real payments will be made.")
        return cls(network=network)

    async def wallet_balance(self) -> WalletBalance:
        return self.balance

    async def add_invoice(self, data: AddInvoiceData) -> Tuple[bytes, str]:
        tags = Tags()
        tags.add(
            TagChar.features,
            Features.from_feature_list(
                {Feature.payment_secret: FeatureState.supported}
            ),
        )
        if data.description_hash:
            tags.add(TagChar.description_hash, data.description_hash.hex())
        else:
            tags.add(TagChar.description, data.memo or "")
        tags.add(TagChar.expire_time, data.expiry or 3600)
        tags.add(TagChar.payment_secret, urandom(32).hex())

        preimage = urandom(32)
        payment_hash = hashlib.sha256(preimage).hexdigest()
        tags.add(TagChar.payment_hash, payment_hash)
        self.preimages[payment_hash] = preimage

        amount_msat = data.value.to(Unit.msat).amount
        bolt11 = Bolt11(
            currency=self.network.bolt11_currency,
            amount_msat=MilliSatoshi(amount_msat) if amount_msat else None,
            date=int(datetime.now().timestamp()),
            tags=tags,
        )
        self.created_invoices.append(data)
        return bytes.fromhex(payment_hash), encode(bolt11, self.privkey)

    async def pay_invoice(
        self, invoice: str, max_fee: Amount, outgoing_channel: Optional[int]
    ) -> LndPaymentResult:
        try:
            obj = decode(invoice)
        except Exception as exc:
            return LndPaymentResult(error=LndRpcError(f"invalid payment request: {exc}"))

        if self.routing_fee.to(Unit.msat).amount > max_fee.to(Unit.msat).amount:
            return LndPaymentResult(error=LndRpcError("insufficient fee limit"))

        if obj.payment_hash in self.paid_invoices:
            return LndPaymentResult(preimage=NULL_PREIMAGE)

        self.paid_invoices.add(obj.payment_hash)
        preimage = self.preimages.get(obj.payment_hash) or hashlib.sha256(
            b"FakeLnd" + bytes.fromhex(obj.payment_hash)
        ).digest()
        return LndPaymentResult(
            preimage=preimage,
            paid_fee=self.routing_fee,
            paid_amount=Amount(Unit.msat, int(obj.amount_msat or 0)),
        )

    async def connect(self, peer: bytes, host: str, permanent: bool) -> None:
        if peer in self.peers:
            raise LndRpcError(f"already connected to peer: {peer.hex()}@{host}")
        self.peers[peer] = LndPeer(pubkey=peer, address=host)
        if permanent:
            self.permanent_peers.add(peer)

    async def list_peers(self) -> List[LndPeer]:
        return list(self.peers.values())

    async def open_channel(
        self, peer: bytes, local_sat: Amount, push_sat: Amount, private: bool
    ) -> OutPoint:
        if peer not in self.peers:
            raise LndRpcError(f"peer {peer.hex()} is not online")
        capacity = local_sat.to(Unit.sat).amount
        push = push_sat.to(Unit.sat).amount
        self.channels.append(
            LndChannelInfo(
                channel_id=len(self.channels) + 1,
                pubkey_bytes=peer,
                capacity=Amount(Unit.sat, capacity),
                local_balance=Amount(Unit.sat, capacity - push),
                remote_balance=Amount(Unit.sat, push),
                active=True,
                private=private,
            )
        )
        return OutPoint(hash=urandom(32), index=0)

    async def list_channels(
        self, active_only: bool, public_only: bool
    ) -> List[LndChannelInfo]:
        return [
            c
            for c in self.channels
            if (c.active or not active_only) and (not c.private or not public_only)
        ]

    async def close(self) -> None:
        self.closed = True
