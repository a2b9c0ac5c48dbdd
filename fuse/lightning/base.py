from abc import ABC, abstractmethod
from typing import List

from ..core.base import (
    Amount,
    Channel,
    ChannelPoint,
    Invoice,
    Network,
    PaymentResult,
    Peer,
    Vertex,
)


class LightningProvider(ABC):
    """Capabilities every lightning node backend has to offer.

    All calls are coroutines. Cancelling the awaiting task aborts the call
    that is in flight on the node.
    """

    network: Network

    # Balance

    @abstractmethod
    async def wallet_balance(self) -> Amount:
        """Confirmed on-chain balance."""

    # Invoices

    @abstractmethod
    async def add_invoice(
        self,
        value: Amount,
        memo: str = "",
        description_hash: bytes = b"",
    ) -> Invoice:
        """Create an invoice. A non-empty `description_hash` replaces `memo`."""

    @abstractmethod
    async def pay_invoice(self, invoice: Invoice) -> PaymentResult:
        pass

    # Peers

    @abstractmethod
    async def list_peers(self) -> List[Peer]:
        pass

    @abstractmethod
    async def connect_peer(self, peer: Vertex, host: str) -> None:
        pass

    # Channels

    @abstractmethod
    async def open_channel(
        self,
        peer: Vertex,
        local_amount: Amount,
        push_amount: Amount,
        private: bool = False,
    ) -> ChannelPoint:
        pass

    @abstractmethod
    async def list_channels(
        self, active_only: bool = False, public_only: bool = False
    ) -> List[Channel]:
        pass
