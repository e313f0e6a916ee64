"""Configuration constants and environment variable loading for the animate generation service."""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# ==================== AIRTABLE ====================
DEFAULT_TABLE_NAME = "animate_generation"

# ==================== WAVESPEED API ====================
WAVESPEED_BASE_URL = "https://api.wavespeed.ai/api/v3"
WAVESPEED_SUBMIT_PATH = "/wavespeed-ai/wan-2.2/animate"
WAVESPEED_RESULT_PATH = "/predictions"
SUBMIT_SUCCESS_CODE = 200

# ==================== GENERATION INPUTS ====================
MODES = ("animate", "replace")
RESOLUTIONS = ("480p", "720p")
DEFAULT_MODE = "animate"
DEFAULT_RESOLUTION = "720p"
DEFAULT_SEED = -1

MODE_SOURCE_RECORD = "record"
MODE_SOURCE_FIXED = "fixed"
MODE_SOURCES = (MODE_SOURCE_RECORD, MODE_SOURCE_FIXED)

# ==================== OUTPUT STORAGE ====================
OUTPUT_ATTACHMENT = "attachment"  # [{"url": ...}], Airtable fetches it
OUTPUT_URL = "url"                # bare URL string
OUTPUT_UPLOAD = "upload"          # download here, upload bytes to Airtable
OUTPUT_STORAGES = (OUTPUT_ATTACHMENT, OUTPUT_URL, OUTPUT_UPLOAD)

# ==================== POLLING ====================
POLL_INTERVAL_SECONDS = 5.0
POLL_MAX_ATTEMPTS = 120  # 10 minutes max (5 seconds * 120)
HTTP_TIMEOUT_SECONDS = 60.0

# ==================== RECORD STATUS ====================
STATUS_GENERATING = "Generating..."
STATUS_PROCESSING = "Processing..."
STATUS_COMPLETED = "Completed"
STATUS_FAILED = "Failed"

SERVICE_NAME = "Wan 2.2 Animate Generation"


@dataclass
class AnimateConfig:
    """Everything the pipeline, its clients and the webhook server need.

    Built once at startup (usually by ``from_env``) and passed down
    explicitly; nothing below the server reads the environment.
    """
    airtable_token: Optional[str] = field(default=None, repr=False)
    airtable_base_id: Optional[str] = None
    wavespeed_api_key: Optional[str] = field(default=None, repr=False)

    port: int = 3000
    table_name: str = DEFAULT_TABLE_NAME

    base_url: str = WAVESPEED_BASE_URL
    submit_path: str = WAVESPEED_SUBMIT_PATH
    result_path: str = WAVESPEED_RESULT_PATH

    mode_source: str = MODE_SOURCE_RECORD
    default_mode: str = DEFAULT_MODE
    default_resolution: str = DEFAULT_RESOLUTION
    output_storage: str = OUTPUT_ATTACHMENT

    poll_interval: float = POLL_INTERVAL_SECONDS
    max_attempts: int = POLL_MAX_ATTEMPTS
    http_timeout: float = HTTP_TIMEOUT_SECONDS

    @property
    def submit_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.submit_path}"

    def result_url(self, job_id: str) -> str:
        return f"{self.base_url.rstrip('/')}{self.result_path}/{job_id}/result"

    def validate(self) -> "AnimateConfig":
        """Raise ValueError naming every missing credential or bad choice."""
        problems = []
        if not self.airtable_token:
            problems.append("AIRTABLE_TOKEN is not set")
        if not self.airtable_base_id:
            problems.append("AIRTABLE_BASE_ID is not set")
        if not self.wavespeed_api_key:
            problems.append("WAVESPEED_API_KEY is not set")
        if self.mode_source not in MODE_SOURCES:
            problems.append(f"ANIMATE_MODE_SOURCE must be one of {MODE_SOURCES}, got {self.mode_source!r}")
        if self.default_mode not in MODES:
            problems.append(f"ANIMATE_DEFAULT_MODE must be one of {MODES}, got {self.default_mode!r}")
        if self.default_resolution not in RESOLUTIONS:
            problems.append(
                f"ANIMATE_DEFAULT_RESOLUTION must be one of {RESOLUTIONS}, got {self.default_resolution!r}"
            )
        if self.output_storage not in OUTPUT_STORAGES:
            problems.append(f"OUTPUT_STORAGE must be one of {OUTPUT_STORAGES}, got {self.output_storage!r}")
        if self.poll_interval < 0:
            problems.append("POLL_INTERVAL_SECONDS must not be negative")
        if self.max_attempts < 1:
            problems.append("POLL_MAX_ATTEMPTS must be at least 1")
        if problems:
            raise ValueError("Invalid configuration: " + "; ".join(problems))
        return self

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "AnimateConfig":
        """Load settings from the environment (and a .env file if present)."""
        load_dotenv(dotenv_path)

        config = cls(
            airtable_token=os.getenv("AIRTABLE_TOKEN") or os.getenv("AIRTABLE_API_KEY"),
            airtable_base_id=os.getenv("AIRTABLE_BASE_ID"),
            wavespeed_api_key=os.getenv("WAVESPEED_API_KEY"),
            port=int(os.getenv("PORT", "3000")),
            table_name=os.getenv("AIRTABLE_TABLE_NAME", DEFAULT_TABLE_NAME),
            base_url=os.getenv("WAVESPEED_BASE_URL", WAVESPEED_BASE_URL),
            submit_path=os.getenv("WAVESPEED_SUBMIT_PATH", WAVESPEED_SUBMIT_PATH),
            result_path=os.getenv("WAVESPEED_RESULT_PATH", WAVESPEED_RESULT_PATH),
            mode_source=os.getenv("ANIMATE_MODE_SOURCE", MODE_SOURCE_RECORD).lower(),
            default_mode=os.getenv("ANIMATE_DEFAULT_MODE", DEFAULT_MODE),
            default_resolution=os.getenv("ANIMATE_DEFAULT_RESOLUTION", DEFAULT_RESOLUTION),
            output_storage=os.getenv("OUTPUT_STORAGE", OUTPUT_ATTACHMENT).lower(),
            poll_interval=float(os.getenv("POLL_INTERVAL_SECONDS", str(POLL_INTERVAL_SECONDS))),
            max_attempts=int(os.getenv("POLL_MAX_ATTEMPTS", str(POLL_MAX_ATTEMPTS))),
            http_timeout=float(os.getenv("HTTP_TIMEOUT_SECONDS", str(HTTP_TIMEOUT_SECONDS))),
        )
        return config.validate()
