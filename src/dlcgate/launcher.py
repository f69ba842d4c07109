from __future__ import annotations

import logging
import webbrowser
from typing import Optional, Protocol

from .errors import LaunchFailedError, NoPurchaseUrlConfigured

logger = logging.getLogger(__name__)


class UriLauncher(Protocol):
    """Opens a URI with the platform's default handler. Returns success."""

    def open(self, uri: str) -> bool:
        ...


class WebBrowserLauncher:
    """Default launcher backed by the system web browser."""

    def open(self, uri: str) -> bool:
        return webbrowser.open(uri, new=2)


def launch_store_url(url: Optional[str], launcher: Optional[UriLauncher] = None) -> None:
    """Open ``url`` through ``launcher``.

    Raises NoPurchaseUrlConfigured when there is no URL and LaunchFailedError
    when the launcher reports failure or raises.
    """
    if not url:
        raise NoPurchaseUrlConfigured("No purchase URL configured")
    launcher = launcher or WebBrowserLauncher()
    try:
        ok = launcher.open(url)
    except Exception as e:
        raise LaunchFailedError(f"Failed to open {url}: {e}") from e
    if not ok:
        raise LaunchFailedError(f"Failed to open {url}")
    logger.info("Opened store page %s", url)
