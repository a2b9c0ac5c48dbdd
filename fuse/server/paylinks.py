from dataclasses import dataclass
from os import urandom
from typing import Dict

from ..core.errors import AmountOutOfRangeError, LnurlResponseError, PayLinkNotFoundError
from ..core.lnurl import Metadata


@dataclass(frozen=True)
class PayLink:
    id: str
    description: str
    min_sendable: int  # msat
    max_sendable: int  # msat

    @property
    def metadata(self) -> Metadata:
        return Metadata.from_description(self.description)

    def check_amount(self, amount_msat: int) -> None:
        if not self.min_sendable <= amount_msat <= self.max_sendable:
            raise AmountOutOfRangeError(
                amount_msat, self.min_sendable, self.max_sendable
            )


class PayLinkStore:
    """Pay links served over LNURL-pay, kept in memory for the process lifetime."""

    def __init__(self):
        self.links: Dict[str, PayLink] = {}

    def create(self, description: str, min_sendable: int, max_sendable: int) -> PayLink:
        if max_sendable < min_sendable:
            raise LnurlResponseError("maxSendable must be larger than minSendable")
        link = PayLink(
            id=urandom(8).hex(),
            description=description,
            min_sendable=min_sendable,
            max_sendable=max_sendable,
        )
        self.links[link.id] = link
        return link

    def get(self, link_id: str) -> PayLink:
        link = self.links.get(link_id)
        if link is None:
            raise PayLinkNotFoundError(link_id)
        return link
