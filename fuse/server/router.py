from fastapi import APIRouter, Depends, Query
from loguru import logger

from ..core.base import Amount, Unit, Vertex
from ..core.bolt11 import decode_invoice
from ..core.lnurl import encode_lnurl
from ..core.models import (
    BalanceResponse,
    CreateInvoiceResponse,
    CreateLnurlpCodeResponse,
    ListChannelsResponse,
    ListPeersResponse,
    LnurlPayCallbackResponse,
    LnurlPayResponse,
    OpenChannelResponse,
    PayResponse,
    PostChannelRequest,
    PostInvoiceRequest,
    PostLnurlpRequest,
    PostPaymentRequest,
    PostPeerRequest,
)
from ..core.settings import settings
from ..lightning.base import LightningProvider
from .paylinks import PayLinkStore
from .startup import get_paylinks, get_provider

router: APIRouter = APIRouter()


@router.get(
    "/balance",
    name="Wallet balance",
    summary="Confirmed on-chain balance of the node in satoshis",
    response_model=BalanceResponse,
)
async def balance(
    provider: LightningProvider = Depends(get_provider),
) -> BalanceResponse:
    logger.trace("> GET /balance")
    confirmed = await provider.wallet_balance()
    return BalanceResponse(balance=confirmed.to(Unit.sat).amount)


@router.post(
    "/invoices",
    name="Create invoice",
    summary="Request a BOLT-11 invoice from the node",
    response_model=CreateInvoiceResponse,
)
async def create_invoice(
    payload: PostInvoiceRequest,
    provider: LightningProvider = Depends(get_provider),
) -> CreateInvoiceResponse:
    logger.trace(f"> POST /invoices: {payload}")
    invoice = await provider.add_invoice(Amount(Unit.sat, payload.amount), payload.memo)
    logger.trace(f"< POST /invoices: {invoice.encoded}")
    return CreateInvoiceResponse.from_invoice(invoice)


@router.post(
    "/payments",
    name="Pay invoice",
    summary="Pay a BOLT-11 invoice and wait for the result",
    response_model=PayResponse,
)
async def pay_invoice(
    payload: PostPaymentRequest,
    provider: LightningProvider = Depends(get_provider),
) -> PayResponse:
    logger.trace(f"> POST /payments: {payload}")
    invoice = decode_invoice(payload.invoice, provider.network)
    result = await provider.pay_invoice(invoice)
    logger.trace(f"< POST /payments: {result.preimage.hex()}")
    return PayResponse.from_result(result)


@router.get(
    "/peers",
    name="List peers",
    response_model=ListPeersResponse,
)
async def list_peers(
    provider: LightningProvider = Depends(get_provider),
) -> ListPeersResponse:
    logger.trace("> GET /peers")
    peers = await provider.list_peers()
    return ListPeersResponse.from_peers(peers)


@router.post(
    "/peers",
    name="Connect peer",
    summary="Connect to a peer and keep the connection alive",
)
async def connect_peer(
    payload: PostPeerRequest,
    provider: LightningProvider = Depends(get_provider),
) -> dict:
    logger.trace(f"> POST /peers: {payload}")
    await provider.connect_peer(Vertex.from_hex(payload.pubkey), payload.host)
    return {}


@router.post(
    "/channels",
    name="Open channel",
    response_model=OpenChannelResponse,
)
async def open_channel(
    payload: PostChannelRequest,
    provider: LightningProvider = Depends(get_provider),
) -> OpenChannelResponse:
    logger.trace(f"> POST /channels: {payload}")
    point = await provider.open_channel(
        Vertex.from_hex(payload.pubkey),
        Amount(Unit.sat, payload.local_amount),
        Amount(Unit.sat, payload.push_amount),
        payload.private,
    )
    logger.trace(f"< POST /channels: {point}")
    return OpenChannelResponse.from_channel_point(point)


@router.get(
    "/channels",
    name="List channels",
    response_model=ListChannelsResponse,
)
async def list_channels(
    active_only: bool = Query(default=False),
    public_only: bool = Query(default=False),
    provider: LightningProvider = Depends(get_provider),
) -> ListChannelsResponse:
    logger.trace("> GET /channels")
    channels = await provider.list_channels(active_only, public_only)
    return ListChannelsResponse.from_channels(channels)


# ------- LNURL-PAY -------


@router.post(
    "/lnurlp",
    name="Create pay link",
    summary="Create an LNURL-pay link and return its bech32 encoded LNURL",
    response_model=CreateLnurlpCodeResponse,
)
async def create_paylink(
    payload: PostLnurlpRequest,
    paylinks: PayLinkStore = Depends(get_paylinks),
) -> CreateLnurlpCodeResponse:
    logger.trace(f"> POST /lnurlp: {payload}")
    link = paylinks.create(
        payload.description,
        payload.min_sendable or settings.lnurlp_min_sendable,
        payload.max_sendable or settings.lnurlp_max_sendable,
    )
    return CreateLnurlpCodeResponse(
        code=encode_lnurl(f"{settings.fuse_url}/lnurlp/{link.id}")
    )


@router.get(
    "/lnurlp/{link_id}",
    name="LNURL-pay parameters",
    response_model=LnurlPayResponse,
)
async def lnurlp_params(
    link_id: str,
    paylinks: PayLinkStore = Depends(get_paylinks),
) -> LnurlPayResponse:
    logger.trace(f"> GET /lnurlp/{link_id}")
    link = paylinks.get(link_id)
    response = LnurlPayResponse.create(
        callback=f"{settings.fuse_url}/lnurlp/{link.id}/callback",
        min_sendable=link.min_sendable,
        max_sendable=link.max_sendable,
        metadata=link.metadata,
    )
    return response.render()


@router.get(
    "/lnurlp/{link_id}/callback",
    name="LNURL-pay callback",
    response_model=LnurlPayCallbackResponse,
)
async def lnurlp_callback(
    link_id: str,
    amount: int = Query(..., gt=0, description="Amount in msat"),
    paylinks: PayLinkStore = Depends(get_paylinks),
    provider: LightningProvider = Depends(get_provider),
) -> LnurlPayCallbackResponse:
    logger.trace(f"> GET /lnurlp/{link_id}/callback?amount={amount}")
    link = paylinks.get(link_id)
    link.check_amount(amount)
    invoice = await provider.add_invoice(
        Amount(Unit.msat, amount),
        description_hash=link.metadata.description_hash(),
    )
    return LnurlPayCallbackResponse.from_invoice(invoice)
