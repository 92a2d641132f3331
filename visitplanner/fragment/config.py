from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class FragmentConfig:
    default_destination: str = os.getenv("VISIT_DEFAULT_DESTINATION", "van-andel-arena")
    min_people: int = 1
    max_people: int = 6
    # Out-of-range party sizes fall back to this value rather than the nearest bound.
    default_people: int = 6


DEFAULT_FRAGMENT_CONFIG = FragmentConfig()
