"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from othello.session import PASS_RULES

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:5174"


@dataclass(frozen=True)
class Settings:
    cors_origins: list[str]
    computer_move_delay: float = 0.5  # seconds
    pass_rule: str = "reference"
    disconnect_grace: float = 60.0  # seconds
    random_seed: int | None = None
    log_level: str = "INFO"


def load_settings() -> Settings:
    load_dotenv()

    cors_origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    pass_rule = os.getenv("PASS_RULE", "reference").strip().lower()
    if pass_rule not in PASS_RULES:
        raise ValueError(f"PASS_RULE must be one of {PASS_RULES}, got {pass_rule!r}")

    delay = float(os.getenv("COMPUTER_MOVE_DELAY", "0.5"))
    if delay < 0:
        raise ValueError("COMPUTER_MOVE_DELAY must not be negative")

    seed = os.getenv("RANDOM_SEED")

    return Settings(
        cors_origins=[o.strip() for o in cors_origins.split(",") if o.strip()],
        computer_move_delay=delay,
        pass_rule=pass_rule,
        disconnect_grace=float(os.getenv("DISCONNECT_GRACE", "60")),
        random_seed=int(seed) if seed else None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


settings = load_settings()
