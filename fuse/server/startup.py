# startup routine of the standalone app. These are the steps that need
# to be taken by external apps importing the fuse server.

from typing import Optional

from loguru import logger

from ..core.base import Amount, Unit
from ..core.errors import BackendConnectionError
from ..core.settings import settings
from ..lightning.base import LightningProvider
from ..lightning.lnd import LndClient, new_client
from .paylinks import PayLinkStore

provider: Optional[LndClient] = None
paylinks = PayLinkStore()


def log_settings():
    logger.debug("Enviroment Settings:")
    for key, value in settings.model_dump().items():
        logger.debug(f"{key}: {value}")


async def start_fuse():
    global provider
    log_settings()
    try:
        provider = await new_client(
            address=settings.lnd_address,
            network=settings.lnd_network,
            macaroon_path=settings.lnd_macaroon_path,
            tls_path=settings.lnd_tls_cert_path,
            max_fee=Amount(Unit.sat, settings.lnd_max_fee_sat),
        )
    except Exception as e:
        logger.error(f"Could not connect to lightning backend: {e}")
        raise
    logger.info("Fuse started.")


async def shutdown_fuse():
    global provider
    if provider is not None:
        await provider.lnd.close()
        provider = None
    logger.info("Fuse shutdown.")


def get_provider() -> LightningProvider:
    if provider is None:
        raise BackendConnectionError("lightning backend is not connected")
    return provider


def get_paylinks() -> PayLinkStore:
    return paylinks
