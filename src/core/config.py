from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings
from web3 import Web3


class Settings(BaseSettings):

    ENVIRONMENT_NAME: str = "Development"

    PROJECT_NAME: str = "Share Vault"
    API_V1_STR: str = "/api/v1"

    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./share_vault.db"

    # EIP-712 domain used by the base asset permit
    CHAIN_ID: int = 1
    PERMIT_DOMAIN_VERSION: str = "1"

    # 1e9 == 100%
    DEFAULT_YIELD_FEE_PERCENTAGE: int = 0
    DEFAULT_YIELD_FEE_RECIPIENT: Optional[str] = None

    LOG_DIR: Optional[str] = None

    # Seq log
    SEQ_SERVER_URL: Optional[str] = None
    SEQ_SERVER_API_KEY: Optional[str] = None

    @field_validator("DEFAULT_YIELD_FEE_RECIPIENT", mode="before")
    def checksum_fee_recipient(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return None
        return Web3.to_checksum_address(v)

    class Config:

        case_sensitive = True
        env_file = ".env"
        extra = "allow"


settings = Settings()
