from typing import Optional


class FuseError(Exception):
    code: int
    detail: str

    def __init__(self, detail, code=0):
        super().__init__(detail)
        self.code = code
        self.detail = detail


class BackendConnectionError(FuseError):
    detail = "failed to connect to lightning backend"
    code = 20000

    def __init__(self, detail: Optional[str] = None, code: Optional[int] = None):
        super().__init__(detail or self.detail, code=code or self.code)


class LndRpcError(FuseError):
    """The node answered a call with an error. `detail` is the node's message."""

    code = 20001

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail, code=self.code)
        self.status_code = status_code


class InvoiceDecodeError(FuseError):
    detail = "could not decode invoice"
    code = 21000

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail, code=self.code)


class InvoiceAlreadyPaidError(FuseError):
    detail = "invoice has already been paid"
    code = 21001

    def __init__(self):
        super().__init__(self.detail, code=self.code)


class LnurlError(FuseError):
    detail = "lnurl error"
    code = 22000

    def __init__(self, detail: Optional[str] = None, code: Optional[int] = None):
        super().__init__(detail or self.detail, code=code or self.code)


class LnurlResponseError(LnurlError):
    code = 22001

    def __init__(self, detail: str):
        super().__init__(detail, code=self.code)


class PayLinkNotFoundError(LnurlError):
    detail = "pay link not found"
    code = 22002

    def __init__(self, link_id: Optional[str] = None):
        detail = f"pay link {link_id} not found" if link_id else self.detail
        super().__init__(detail, code=self.code)


class AmountOutOfRangeError(LnurlError):
    code = 22003

    def __init__(self, amount: int, min_sendable: int, max_sendable: int):
        super().__init__(
            f"amount {amount} msat must be between {min_sendable} and"
            f" {max_sendable} msat",
            code=self.code,
        )
