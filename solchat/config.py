from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

DEFAULT_SYSTEM_PROMPT = (
    "You are a DeFi AI assistant specializing in Solana and crypto. "
    "The user's wallet is already connected; never ask for their wallet address, the tools "
    "receive it automatically. Use the tools to check balances, prepare transfers and swaps, "
    "manage trigger orders, look up prices and manage the contact book. Transactions are "
    "signed by the user's wallet, so describe what will happen and keep replies short."
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8080, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: Optional[bool] = Field(default=None, description="Force JSON (true) or console (false) logs; unset means console at DEBUG only")
    quiet_loggers: List[str] = Field(
        default_factory=lambda: ["uvicorn.access", "httpcore", "httpx", "anthropic"],
        description="Third-party loggers held at WARNING",
    )
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # LLM Provider Settings
    llm_provider: str = Field(default="anthropic", description="Default LLM provider")
    llm_model: str = Field(default="claude-sonnet-4-20250514", description="Default LLM model")
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    max_tokens: int = Field(default=1024, description="Maximum tokens for LLM response")
    temperature: float = Field(default=0.7, description="LLM temperature setting")
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT, description="System instruction sent with every turn")

    # Solana
    solana_rpc_url: str = Field(default="https://api.mainnet-beta.solana.com", description="Solana JSON-RPC endpoint")
    solana_commitment: str = Field(default="confirmed", description="Commitment used for RPC reads")
    solana_helius_api_key: str = Field(
        default="",
        description="Helius API key used for Solana portfolio aggregation",
    )
    solana_balances_base_url: str = Field(
        default="https://api.helius.xyz",
        description="Base URL for Solana balances API",
    )
    explorer_tx_url: str = Field(default="https://solscan.io/tx/", description="Explorer prefix for transaction links")

    # Market data / DEX
    jupiter_quote_api_url: str = Field(default="https://quote-api.jup.ag/v6", description="Jupiter swap quote API")
    jupiter_trigger_api_url: str = Field(
        default="https://lite-api.jup.ag/trigger/v1",
        description="Jupiter trigger (limit) order API",
    )
    jupiter_token_list_url: str = Field(default="https://token.jup.ag/all", description="Jupiter token list")
    dexscreener_base_url: str = Field(default="https://api.dexscreener.com", description="DexScreener API")
    coingecko_base_url: str = Field(default="https://api.coingecko.com/api/v3", description="CoinGecko API")
    coingecko_api_key: str = Field(default="", description="Coingecko API key")
    swap_slippage_bps: int = Field(default=50, ge=0, le=10_000, description="Swap slippage in basis points")

    # Cache Settings
    token_cache_ttl_seconds: int = Field(default=3600, ge=1, description="TTL for resolved token symbols")
    token_cache_max_size: int = Field(default=1000, ge=1, description="Maximum resolved tokens kept in memory")
    token_metadata_ttl_seconds: int = Field(default=3600, ge=1, description="TTL for the token metadata list")
    default_token_decimals: int = Field(default=6, ge=0, description="Decimals assumed for dynamically resolved mints")

    # Retries
    retry_max_attempts: int = Field(default=3, ge=1, description="Attempts for transient upstream failures")
    retry_backoff_seconds: float = Field(default=1.0, ge=0, description="Linear backoff step between attempts")
    request_timeout_seconds: int = Field(default=30, description="Request timeout")

    # Contacts
    contacts_file: Path = Field(default=BASE_DIR / "data" / "contacts.json", description="Contact book JSON file")

    # Tool defaults
    transaction_history_default_limit: int = Field(default=5, ge=1, le=50, description="Signatures shown by default")
    price_history_default_days: int = Field(default=7, ge=1, le=365, description="Default price history window")

    # Chat client
    server_url: str = Field(default="http://localhost:8080", description="Base URL the chat client talks to")
    client_history_limit: int = Field(default=20, ge=0, description="Messages replayed as history per prompt")
    confirmation_commitment: str = Field(default="processed", description="Commitment awaited after submission")
    confirmation_timeout_seconds: float = Field(default=60.0, description="Max wait for confirmation")

    @property
    def has_anthropic_key(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def has_helius_key(self) -> bool:
        return bool(self.solana_helius_api_key)

    @property
    def has_llm_key(self) -> bool:
        """Check if we have an API key for the configured LLM provider"""
        if self.llm_provider.lower() in ["anthropic", "claude"]:
            return self.has_anthropic_key
        return False


# Global settings instance
settings = Settings()
