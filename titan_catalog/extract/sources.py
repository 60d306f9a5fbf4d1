"""Retrieval of catalog source files."""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional
from urllib.parse import quote

import httpx

from ..config import CatalogConfig
from ..markup import Node, parse

logger = logging.getLogger(__name__)


@dataclass
class FetchedSources:
    """Parsed documents in file order, plus retrieval warnings."""
    documents: list[Node] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def file_url(base_url: str, file_name: str) -> str:
    """Join and percent-encode a catalog file name ("Adeptus Titanicus 2018.gst")."""
    return base_url + quote(file_name)


@asynccontextmanager
async def http_client(
    config: CatalogConfig, client: Optional[httpx.AsyncClient] = None
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield ``client`` as-is, or a short-lived client owned by this block."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=config.timeout, follow_redirects=True) as owned:
        yield owned


async def fetch_text(client: httpx.AsyncClient, url: str) -> tuple[Optional[str], int]:
    """(body, status); body is None for non-2xx responses.

    Transport errors propagate.
    """
    response = await client.get(url)
    if not response.is_success:
        return None, response.status_code
    return response.text, response.status_code


async def fetch_sources(config: CatalogConfig, client: httpx.AsyncClient) -> FetchedSources:
    """Fetch and parse every configured file.

    Requests run concurrently; results keep the configured file order. A
    non-2xx file is recorded as a warning and left out.
    """
    urls = [file_url(config.base_url, name) for name in config.files]
    responses = await asyncio.gather(*(fetch_text(client, url) for url in urls))

    sources = FetchedSources()
    for name, (text, status) in zip(config.files, responses):
        if text is None:
            message = f"Failed to fetch catalog file: {name} ({status})"
            logger.warning(message)
            sources.warnings.append(message)
            continue
        sources.documents.append(parse(text))
        sources.files.append(name)
        logger.debug("Fetched %s (%d chars)", name, len(text))
    return sources
