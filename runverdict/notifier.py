"""Thin client for publishing messages to an ntfy topic."""

from __future__ import annotations

import time
from urllib.parse import quote

import requests

from runverdict.config import Settings
from runverdict.errors import ConfigurationError, DeliveryError
from utils.logging_utils import get_tagged_logger, mask_secret_url

logger = get_tagged_logger(__name__, tag="notifier")


class NtfyNotifier:
    """Minimal publisher for the ntfy HTTP API (one POST per message, no retries)."""

    def __init__(
        self,
        base_url: str = "https://ntfy.sh",
        *,
        topic: str | None = None,
        title: str | None = None,
        click_url: str | None = None,
        priority: int | None = None,
        timeout: float = 10.0,
    ):
        self.base_url = str(base_url).rstrip("/")
        self.topic = topic
        self.title = title
        self.click_url = click_url
        self.priority = priority
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "NtfyNotifier":
        return cls(
            settings.ntfy_base_url,
            topic=settings.ntfy_topic,
            title=settings.ntfy_title,
            click_url=settings.ntfy_click_url,
            priority=settings.ntfy_priority,
            timeout=settings.http_timeout_seconds,
        )

    def url_for(self, topic: str) -> str:
        return f"{self.base_url}/{quote(topic, safe='')}"

    def headers(self) -> dict[str, str]:
        headers = {}
        if self.title:
            headers["Title"] = self.title
        if self.click_url:
            headers["Click"] = self.click_url
        if self.priority is not None:
            headers["Priority"] = str(self.priority)
        return headers

    def send(self, message: str, topic: str | None = None) -> None:
        """Publish `message`; raise DeliveryError unless ntfy acknowledges it."""
        topic = topic or self.topic
        if not topic:
            raise ConfigurationError("Missing ntfy topic (set NTFY_TOPIC)")

        url = self.url_for(topic)
        masked = mask_secret_url(url)
        started = time.monotonic()
        try:
            r = requests.post(
                url,
                data=message.encode("utf-8"),
                headers=self.headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.error("ntfy POST to %s failed: %s", masked, exc)
            raise DeliveryError(str(exc)) from exc

        if not 200 <= r.status_code < 300:
            error_text = (getattr(r, "text", "") or "")[:200]
            raise DeliveryError(f"{r.status_code} {error_text}".strip(), status_code=r.status_code)

        logger.info(
            "Pushed verdict to %s (status %d) in %.3fs", masked, r.status_code, time.monotonic() - started
        )
