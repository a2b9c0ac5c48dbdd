import asyncio
import importlib
from typing import List, Optional, Type, Union

from loguru import logger

from ..core.base import (
    NULL_PREIMAGE,
    Amount,
    Channel,
    ChannelPoint,
    Invoice,
    Network,
    PaymentResult,
    Peer,
    Unit,
    Vertex,
)
from ..core.bolt11 import decode_invoice
from ..core.errors import InvoiceAlreadyPaidError
from ..core.settings import settings
from .base import LightningProvider
from .protocols import AddInvoiceData, Lnd, LndPaymentResult


def classify_payment(result: LndPaymentResult) -> PaymentResult:
    """Turn the node's payment outcome into a PaymentResult.

    A node that was asked to pay an invoice it already paid answers with an
    all-zero preimage. That is reported as InvoiceAlreadyPaidError whether or
    not an error came with it, never as a fresh successful payment.
    """
    if result.preimage == NULL_PREIMAGE:
        raise InvoiceAlreadyPaidError()

    if result.error is not None:
        raise result.error

    return PaymentResult(preimage=result.preimage, paid_fee=result.paid_fee)


class LndClient(LightningProvider):
    """Lightning provider backed by a connected LND node."""

    def __init__(self, lnd: Lnd, network: Union[Network, str], max_fee: Amount):
        self.lnd = lnd
        self.network = Network(network)
        self.max_fee = max_fee

    async def wallet_balance(self) -> Amount:
        balance = await self.lnd.wallet_balance()
        return balance.confirmed

    async def add_invoice(
        self,
        value: Amount,
        memo: str = "",
        description_hash: bytes = b"",
    ) -> Invoice:
        data = AddInvoiceData(value=value.to(Unit.msat))
        if description_hash:
            data.description_hash = description_hash
        else:
            data.memo = memo

        _, encoded = await self.lnd.add_invoice(data)
        logger.debug(f"LND created invoice for {value.str()}: {encoded}")
        return decode_invoice(encoded, self.network)

    async def pay_invoice(self, invoice: Invoice) -> PaymentResult:
        result = await self.lnd.pay_invoice(invoice.encoded, self.max_fee, None)
        return classify_payment(result)

    async def list_peers(self) -> List[Peer]:
        lnd_peers = await self.lnd.list_peers()
        return [
            Peer(
                address=p.address,
                inbound=p.inbound,
                ping_time=p.ping_time,
                pubkey=Vertex(p.pubkey),
                sent=p.sent,
                received=p.received,
            )
            for p in lnd_peers
        ]

    async def connect_peer(self, peer: Vertex, host: str) -> None:
        await self.lnd.connect(peer.key, host, permanent=True)

    async def open_channel(
        self,
        peer: Vertex,
        local_amount: Amount,
        push_amount: Amount,
        private: bool = False,
    ) -> ChannelPoint:
        outpoint = await self.lnd.open_channel(
            peer.key, local_amount.to(Unit.sat), push_amount.to(Unit.sat), private
        )
        return ChannelPoint(funding_txid=outpoint.hash, output_index=outpoint.index)

    async def list_channels(
        self, active_only: bool = False, public_only: bool = False
    ) -> List[Channel]:
        lnd_channels = await self.lnd.list_channels(active_only, public_only)
        return [
            Channel(
                id=c.channel_id,
                capacity=c.capacity,
                local_balance=c.local_balance,
                remote_balance=c.remote_balance,
                active=c.active,
                private=c.private,
                remote_pubkey=Vertex(c.pubkey_bytes),
            )
            for c in lnd_channels
        ]


def lnd_backend(name: Optional[str] = None) -> Type:
    backends_module = importlib.import_module("fuse.lightning")
    return getattr(backends_module, name or settings.fuse_lightning_backend)


async def connect(
    address: Optional[str],
    network: str,
    macaroon_path: Optional[str],
    tls_path: Optional[str],
    backend: Optional[Type] = None,
    attempts: Optional[int] = None,
    delay: Optional[float] = None,
) -> Lnd:
    """Connect to the node, retrying while it is not ready to serve calls.

    Gives up after `attempts` tries spaced `delay` seconds apart and raises the
    error of the last attempt.
    """
    backend = backend or lnd_backend()
    attempts = attempts or settings.lnd_connect_attempts
    delay = settings.lnd_connect_delay if delay is None else delay

    last_exc: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        try:
            return await backend.create(address, network, macaroon_path, tls_path)
        except Exception as exc:
            last_exc = exc
            logger.warning(
                f"Failed to connect to LND (attempt {attempt}/{attempts}): {exc}"
            )
            if attempt < attempts:
                await asyncio.sleep(delay)
    assert last_exc is not None
    raise last_exc


async def new_client(
    address: Optional[str],
    network: str,
    macaroon_path: Optional[str],
    tls_path: Optional[str],
    max_fee: Amount,
    **kwargs,
) -> LndClient:
    lnd = await connect(address, network, macaroon_path, tls_path, **kwargs)
    logger.info(f"Connected to LND at {address} ({network})")
    return LndClient(lnd=lnd, network=network, max_fee=max_fee)
