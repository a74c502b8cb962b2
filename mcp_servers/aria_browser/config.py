from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

IMAGE_RESPONSES_INCLUDE = "include"
IMAGE_RESPONSES_OMIT = "omit"

RESPONSE_FORMAT_JSON = "json"
RESPONSE_FORMAT_MARKDOWN = "markdown"


def expand_path(raw: str) -> str:
    return str(Path(raw).expanduser())


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class BrowserConfig:
    cdp_host: str = "127.0.0.1"
    cdp_port: int = 9222
    cdp_timeout: float = 10.0
    image_responses: str = IMAGE_RESPONSES_INCLUDE
    response_format: str = RESPONSE_FORMAT_JSON
    console_max_chars: int = 100
    title_refresh_timeout: float = 2.0
    download_dir: str = expand_path("~/.cache/aria-browser/downloads")
    screenshot_max_width: int = 1280
    allow_hosts: list[str] = field(default_factory=list)

    @staticmethod
    def normalize_image_responses(raw: str | None) -> str:
        mode = (raw or "").strip().lower()
        if mode in {"omit", "none", "off", "false", "0"}:
            return IMAGE_RESPONSES_OMIT
        return IMAGE_RESPONSES_INCLUDE

    @staticmethod
    def normalize_response_format(raw: str | None) -> str:
        fmt = (raw or "").strip().lower()
        if fmt in {"markdown", "md", "text"}:
            return RESPONSE_FORMAT_MARKDOWN
        return RESPONSE_FORMAT_JSON

    @classmethod
    def from_env(cls) -> BrowserConfig:
        host = (os.environ.get("MCP_BROWSER_HOST") or "").strip() or "127.0.0.1"
        allow_raw = os.environ.get("MCP_ALLOW_HOSTS", "")
        allow_hosts = [h.strip().lower() for h in allow_raw.split(",") if h.strip() and h.strip() != "*"]
        return cls(
            cdp_host=host,
            cdp_port=_env_int("MCP_BROWSER_PORT", 9222),
            cdp_timeout=max(0.5, _env_float("MCP_CDP_TIMEOUT", 10.0)),
            image_responses=cls.normalize_image_responses(os.environ.get("MCP_IMAGE_RESPONSES")),
            response_format=cls.normalize_response_format(os.environ.get("MCP_RESPONSE_FORMAT")),
            console_max_chars=max(1, _env_int("MCP_CONSOLE_MAX_CHARS", 100)),
            title_refresh_timeout=max(0.1, _env_float("MCP_TITLE_REFRESH_TIMEOUT", 2.0)),
            download_dir=expand_path(os.environ.get("MCP_DOWNLOAD_DIR", "~/.cache/aria-browser/downloads")),
            screenshot_max_width=max(0, _env_int("MCP_SCREENSHOT_MAX_WIDTH", 1280)),
            allow_hosts=allow_hosts,
        )

    @property
    def omit_images(self) -> bool:
        return self.image_responses == IMAGE_RESPONSES_OMIT

    def http_url(self, path: str) -> str:
        """CDP HTTP endpoint URL (``/json/...``) on the configured host/port."""
        suffix = path if path.startswith("/") else "/" + path
        return f"http://{self.cdp_host}:{self.cdp_port}{suffix}"

    def is_host_allowed(self, host: str) -> bool:
        host = (host or "").strip().lower().rstrip(".")
        if not self.allow_hosts:
            return True
        for raw_allowed in self.allow_hosts:
            allowed = (raw_allowed or "").strip().lower().lstrip(".").rstrip(".")
            if not allowed:
                continue
            if host == allowed or host.endswith("." + allowed):
                return True
        return False
