import logging
import os
from dataclasses import dataclass, field


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    static_dir: str = "public"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


def get_settings() -> Settings:
    return Settings(
        host=os.getenv("WALLET_HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level=os.getenv("WALLET_LOG_LEVEL", "INFO").upper(),
        static_dir=os.getenv("WALLET_STATIC_DIR", "public"),
        cors_origins=_split_csv(os.getenv("WALLET_CORS_ORIGINS", "*")) or ["*"],
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
