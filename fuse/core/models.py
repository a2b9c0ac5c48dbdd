from typing import List, Optional

from pydantic import BaseModel, Field, model_serializer

from .base import Channel, ChannelPoint, Invoice, PaymentResult, Peer, Unit
from .errors import LnurlResponseError
from .lnurl import PAY_REQUEST_TAG, Metadata

# ------- API: REQUESTS -------


class PostInvoiceRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Amount in satoshis.")
    memo: str = ""


class PostPaymentRequest(BaseModel):
    invoice: str


class PostPeerRequest(BaseModel):
    pubkey: str
    host: str


class PostChannelRequest(BaseModel):
    pubkey: str
    local_amount: int = Field(..., gt=0, description="Funding amount in satoshis.")
    push_amount: int = Field(default=0, ge=0)
    private: bool = False


class PostLnurlpRequest(BaseModel):
    description: str
    min_sendable: Optional[int] = Field(default=None, gt=0, description="msat")
    max_sendable: Optional[int] = Field(default=None, gt=0, description="msat")


# ------- API: RESPONSES -------


class BalanceResponse(BaseModel):
    balance: int


class CreateInvoiceResponse(BaseModel):
    invoice: str

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "CreateInvoiceResponse":
        return cls(invoice=invoice.encoded)


class PayResponse(BaseModel):
    preimage: str
    paid_fee: float

    @classmethod
    def from_result(cls, result: PaymentResult) -> "PayResponse":
        return cls(
            preimage=result.preimage.hex(),
            paid_fee=result.paid_fee.to_float(Unit.sat),
        )


class OpenChannelResponse(BaseModel):
    hash: str
    index: int

    @classmethod
    def from_channel_point(cls, point: ChannelPoint) -> "OpenChannelResponse":
        return cls(hash=point.funding_txid.hex(), index=point.output_index)


class ChannelResponse(BaseModel):
    id: int
    local_balance: int
    remote_balance: int
    capacity: int
    active: bool
    private: bool
    remote_pubkey: str


class ListChannelsResponse(BaseModel):
    channels: List[ChannelResponse] = []

    @classmethod
    def from_channels(cls, channels: List[Channel]) -> "ListChannelsResponse":
        return cls(
            channels=[
                ChannelResponse(
                    id=c.id,
                    local_balance=c.local_balance.to(Unit.sat).amount,
                    remote_balance=c.remote_balance.to(Unit.sat).amount,
                    capacity=c.capacity.to(Unit.sat).amount,
                    active=c.active,
                    private=c.private,
                    remote_pubkey=c.remote_pubkey.hex(),
                )
                for c in channels
            ]
        )


class PeerResponse(BaseModel):
    address: str
    inbound: bool
    ping_time: int
    pubkey: str
    sent: int
    received: int


class ListPeersResponse(BaseModel):
    peers: List[PeerResponse] = []

    @classmethod
    def from_peers(cls, peers: List[Peer]) -> "ListPeersResponse":
        return cls(
            peers=[
                PeerResponse(
                    address=p.address,
                    inbound=p.inbound,
                    ping_time=p.ping_time,
                    pubkey=p.pubkey.hex(),
                    sent=p.sent.to(Unit.sat).amount,
                    received=p.received.to(Unit.sat).amount,
                )
                for p in peers
            ]
        )


# ------- API: LNURL-PAY (LUD-06) -------


class CreateLnurlpCodeResponse(BaseModel):
    code: str


class LnurlPayResponse(BaseModel):
    """First LNURL-pay response, telling the wallet where and how much to pay.

    `maxSendable >= minSendable` is checked whenever the response is
    serialized, so an invalid instance can't leave the service.
    """

    callback: str
    maxSendable: int
    minSendable: int
    metadata: str
    tag: str = PAY_REQUEST_TAG

    @classmethod
    def create(
        cls,
        callback: str,
        min_sendable: int,
        max_sendable: int,
        metadata: Metadata,
        tag: str = PAY_REQUEST_TAG,
    ) -> "LnurlPayResponse":
        return cls(
            callback=callback,
            minSendable=min_sendable,
            maxSendable=max_sendable,
            metadata=metadata.encode(),
            tag=tag,
        )

    def render(self) -> "LnurlPayResponse":
        if self.maxSendable < self.minSendable:
            raise LnurlResponseError("maxSendable must be larger than minSendable")
        return self

    @model_serializer(mode="wrap")
    def _render_before_serialize(self, handler):
        self.render()
        return handler(self)


class LnurlPayCallbackResponse(BaseModel):
    pr: str
    routes: List[str] = []

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "LnurlPayCallbackResponse":
        return cls(pr=invoice.encoded, routes=[])


class LnurlErrorResponse(BaseModel):
    status: str = "ERROR"
    reason: str
