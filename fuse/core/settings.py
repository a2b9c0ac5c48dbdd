import os
import sys
from pathlib import Path
from typing import Optional

from environs import Env  # type: ignore
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

env = Env()

VERSION = "0.1.0"


def find_env_file():
    # env file: default to current dir, else home dir
    env_file = os.path.join(os.getcwd(), ".env")
    if not os.path.isfile(env_file):
        env_file = os.path.join(str(Path.home()), ".fuse", ".env")
    if os.path.isfile(env_file):
        env.read_env(env_file, recurse=False, override=True)
    else:
        env_file = ""
    return env_file


class FuseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=find_env_file() or None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env_file: Optional[str] = Field(default=None)


class EnvSettings(FuseSettings):
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")


class ServerSettings(FuseSettings):
    fuse_listen_host: str = Field(default="127.0.0.1")
    fuse_listen_port: int = Field(default=3339)
    fuse_url: Optional[str] = Field(
        default=None,
        description="Public base URL of this service, used in LNURL callbacks.",
    )
    fuse_lightning_backend: str = Field(default="LndRestNode")


class LndSettings(FuseSettings):
    lnd_address: Optional[str] = Field(default=None)
    lnd_network: str = Field(default="mainnet")
    lnd_macaroon_path: Optional[str] = Field(default=None)
    lnd_tls_cert_path: Optional[str] = Field(default=None)
    lnd_tls_verify: bool = Field(default=True)
    lnd_max_fee_sat: int = Field(
        default=100, ge=0, description="Maximum routing fee for outgoing payments."
    )
    lnd_connect_attempts: int = Field(default=10, gt=0)
    lnd_connect_delay: float = Field(
        default=1.0, ge=0, description="Seconds between connection attempts."
    )


class LnurlSettings(FuseSettings):
    lnurlp_min_sendable: int = Field(default=1000, gt=0, description="msat")
    lnurlp_max_sendable: int = Field(default=1_000_000_000, gt=0, description="msat")


class Settings(
    EnvSettings,
    ServerSettings,
    LndSettings,
    LnurlSettings,
    FuseSettings,
):
    version: str = Field(default=VERSION)


settings = Settings()


def startup_settings_tasks():
    settings.env_file = find_env_file()

    if not settings.debug:
        # set traceback limit
        sys.tracebacklimit = 0

    if not settings.fuse_url:
        host = settings.fuse_listen_host
        if host in ["localhost", "127.0.0.1"]:
            settings.fuse_url = f"http://{host}:{settings.fuse_listen_port}"
        else:
            settings.fuse_url = f"https://{host}:{settings.fuse_listen_port}"
    settings.fuse_url = settings.fuse_url.rstrip("/")


startup_settings_tasks()
