"""Application lifecycle management for startup and shutdown tasks.

This module handles the FastAPI lifespan context manager that builds every client and service
once, parks them on app.state for the dependency getters, runs the periodic cache invalidation
loop and closes everything again on shutdown.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI

from discovinyl.application.cache.row_cache import SheetRowCache
from discovinyl.application.services.artwork_service import ArtworkService
from discovinyl.application.services.auth_service import AuthService, TokenService
from discovinyl.application.services.catalog_service import CatalogService
from discovinyl.application.services.enrichment_service import EnrichmentService
from discovinyl.config import Settings, get_settings
from discovinyl.infrastructure.integrations.coverartarchive_client import (
    CoverArtArchiveClient,
)
from discovinyl.infrastructure.integrations.google_oauth_client import GoogleOAuthClient
from discovinyl.infrastructure.integrations.google_sheets_client import (
    GoogleSheetsClient,
    build_service_account_credentials,
)
from discovinyl.infrastructure.integrations.http_pool import HttpClientPool
from discovinyl.infrastructure.integrations.musicbrainz_client import MusicBrainzClient
from discovinyl.infrastructure.observability import configure_logging
from discovinyl.infrastructure.persistence.range_resolver import (
    SheetRangeResolver,
    build_candidates,
)

logger = logging.getLogger(__name__)

# app.state attributes holding something with an async close()
CLOSEABLE_CLIENTS = ("sheets_client", "musicbrainz_client", "cover_art_client", "oauth_client")


# Hey future me - this is the ONLY background task in the app. It wakes up every
# CACHE_INVALIDATION_INTERVAL seconds and drops the row cache, so hand edits in the sheet show
# up even when nobody writes through the API. An error in one round is logged and the loop
# keeps going; only cancellation (shutdown) ends it.
async def periodic_cache_invalidation(row_cache: SheetRowCache, interval_seconds: float) -> None:
    """Invalidate the row cache every interval_seconds until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await row_cache.invalidate()
            logger.info("Periodic cache invalidation done")
        except Exception as e:
            logger.exception("Periodic cache invalidation failed: %s", e)


def build_services(app: FastAPI, settings: Settings) -> None:
    """Create clients and services and store them on app.state."""
    sheets_client = GoogleSheetsClient(
        settings.sheets, credentials=build_service_account_credentials(settings.sheets)
    )
    resolver = SheetRangeResolver(sheets_client, build_candidates(settings.sheets))
    row_cache = SheetRowCache(
        resolver,
        ttl_seconds=settings.cache.ttl_seconds,
        invalidation_interval_seconds=settings.cache.invalidation_interval_seconds,
        enabled=settings.cache.enabled,
    )
    artwork = ArtworkService()

    musicbrainz_client = MusicBrainzClient(settings.musicbrainz)
    cover_art_client = CoverArtArchiveClient(
        user_agent=f"{settings.musicbrainz.app_name}/{settings.musicbrainz.app_version}"
    )
    oauth_client = GoogleOAuthClient(settings.auth)
    token_service = TokenService(settings.auth)

    app.state.sheets_client = sheets_client
    app.state.musicbrainz_client = musicbrainz_client
    app.state.cover_art_client = cover_art_client
    app.state.oauth_client = oauth_client

    app.state.row_cache = row_cache
    app.state.artwork_service = artwork
    app.state.catalog_service = CatalogService(sheets_client, row_cache, artwork)
    app.state.enrichment_service = EnrichmentService(musicbrainz_client, cover_art_client)
    app.state.token_service = token_service
    app.state.auth_service = AuthService(oauth_client, token_service, settings.frontend_url)


# Listen future me, @asynccontextmanager makes this the FastAPI lifespan. Everything before
# `yield` runs at STARTUP, everything after at SHUTDOWN. validate_startup() raising here is the
# "refuse to start" path - uvicorn exits with the ConfigurationError message.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown tasks including:
    - Logging configuration
    - Configuration validation
    - Client and service construction
    - Periodic cache invalidation task
    - Resource cleanup
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s (%s)", settings.app_name, settings.environment)

    invalidation_task: asyncio.Task[None] | None = None
    try:
        settings.validate_startup()
        build_services(app, settings)
        logger.info("Services initialized")

        if settings.cache.enabled:
            invalidation_task = asyncio.create_task(
                periodic_cache_invalidation(
                    app.state.row_cache, settings.cache.invalidation_interval_seconds
                )
            )
            logger.info(
                "Cache enabled (ttl=%ss, full invalidation every %ss)",
                settings.cache.ttl_seconds,
                settings.cache.invalidation_interval_seconds,
            )
        else:
            logger.info("Cache disabled, every read goes to the sheet")

        yield

    except Exception as e:
        logger.exception("Error during application startup: %s", e)
        raise
    finally:
        logger.info("Shutting down application")

        if invalidation_task is not None:
            invalidation_task.cancel()
            with suppress(asyncio.CancelledError):
                await invalidation_task

        for name in CLOSEABLE_CLIENTS:
            client = getattr(app.state, name, None)
            if client is None:
                continue
            try:
                await client.close()
            except Exception as e:
                logger.exception("Error closing %s: %s", name, e)

        try:
            await HttpClientPool.close()
            logger.info("HTTP client pool closed")
        except Exception as e:
            logger.exception("Error closing HTTP client pool: %s", e)
