from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional

from eth_utils import to_checksum_address
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class ConfigurationError(RuntimeError):
    """Raised when required process configuration is missing or malformed."""

    def __init__(self, missing: List[str], detail: Optional[str] = None):
        self.missing = missing
        names = ", ".join(f"`{name}`" for name in missing)
        message = f"Please set {names}."
        if detail:
            message = f"Please set a valid {names} ({detail})."
        super().__init__(message)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Normalise the contract address and RPC URI."""

        super().model_post_init(__context)

        object.__setattr__(self, "contract_address", self.contract_address.strip())
        object.__setattr__(self, "eth_uri", self.eth_uri.strip())

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Operator identity
    mnemonic: SecretStr = Field(
        default=SecretStr(""),
        description="Secret recovery phrase the operator key is derived from",
    )
    derivation_path: str = Field(
        default="m/44'/60'/0'/0/0",
        description="HD derivation path for the operator key",
    )

    # Network
    eth_uri: str = Field(
        default="",
        description="JSON-RPC endpoint of the target network",
        validation_alias=AliasChoices("eth_uri", "ETH_URI", "rpc_url", "RPC_URL"),
    )
    rpc_timeout_seconds: float = Field(default=30.0, gt=0, description="JSON-RPC request timeout")

    # Target contract
    contract_address: str = Field(default="", description="FluidProposals contract address")

    # Transaction parameters
    gas_limit: int = Field(default=500_000, gt=0, description="Fixed gas limit for keeper calls")
    default_priority_fee_gwei: Decimal = Field(
        default=Decimal("1.5"),
        ge=0,
        description="Priority tip used on EIP-1559 networks",
    )
    confirmation_poll_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Interval between receipt lookups while waiting for confirmation",
    )
    confirmation_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Give up waiting for a receipt after this long (unset waits indefinitely)",
    )

    @property
    def has_mnemonic(self) -> bool:
        return bool(self.mnemonic.get_secret_value().strip())

    @property
    def default_priority_fee_wei(self) -> int:
        return int(self.default_priority_fee_gwei * Decimal(10**9))

    def missing_required(self) -> List[str]:
        missing = []
        if not self.has_mnemonic:
            missing.append("MNEMONIC")
        if not self.eth_uri:
            missing.append("ETH_URI")
        if not self.contract_address:
            missing.append("CONTRACT_ADDRESS")
        return missing

    def validate_required(self) -> None:
        """Raise ConfigurationError unless the mnemonic, RPC URI and a well-formed contract address are set."""
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(missing)
        try:
            to_checksum_address(self.contract_address)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(["CONTRACT_ADDRESS"], detail=str(e)) from e


# Global settings instance
settings = Settings()
