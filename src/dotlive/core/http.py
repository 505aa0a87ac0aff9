"""HTTP helpers with cross-platform TLS guidance."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from importlib import metadata as importlib_metadata
import os

import requests

from .exceptions import FetchError


class TLSCertificateError(FetchError):
    """Raised when TLS certificate verification fails during downloads."""


def _tls_help(url: str) -> str:
    return (
        "TLS certificate verification failed while downloading "
        f"'{url}'. On macOS run the Python 'Install Certificates.command' "
        "(from the python.org installer). On Windows run 'py -m pip install --upgrade certifi'. "
        "On Linux install your 'ca-certificates' package (apt/yum/apk). "
        "Also check system date/time and any proxy or corporate SSL inspection."
    )


def _user_agent() -> str:
    override = os.getenv("DOTLIVE_HTTP_USER_AGENT")
    if override and override.strip():
        return override.strip()
    try:
        version = importlib_metadata.version("dotlive")
    except importlib_metadata.PackageNotFoundError:
        version = "unknown"
    return f"dotlive/{version}"


def fetch_text(
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float | None = 10.0,
) -> str:
    """Download ``url`` and return its body, raising ``FetchError`` on failure."""
    merged = {"User-Agent": _user_agent(), **dict(headers or {})}
    try:
        response = requests.get(url, timeout=timeout, headers=merged)
    except requests.exceptions.SSLError as exc:
        raise TLSCertificateError(_tls_help(url)) from exc
    except requests.exceptions.RequestException as exc:
        raise FetchError(f"Failed to load '{url}': {exc}") from exc

    if not response.ok:
        detail = (response.text or "").strip() or getattr(response, "reason", "") or "no detail"
        raise FetchError(f"Failed to load '{url}' (HTTP {response.status_code}): {detail}")
    return response.text


async def fetch_text_async(
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float | None = 10.0,
) -> str:
    """Run :func:`fetch_text` in a worker thread."""
    return await asyncio.to_thread(fetch_text, url, headers=headers, timeout=timeout)


__all__ = ["TLSCertificateError", "fetch_text", "fetch_text_async"]
