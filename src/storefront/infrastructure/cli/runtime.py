"""Shared plumbing for CLI commands: settings, the event loop, error mapping."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure import bootstrap
from storefront.infrastructure.http.api_client import ApiClient

T = TypeVar("T")


def run(work: Callable[[bootstrap.Settings, ApiClient], Awaitable[T]]) -> T:
    """Build settings and an API client, run *work* on a fresh event loop.

    Domain errors become ``click.ClickException`` so click prints them
    and exits non-zero.
    """
    try:
        config = bootstrap.settings()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    async def _main() -> T:
        async with bootstrap.api_client(config) as client:
            return await work(config, client)

    try:
        return asyncio.run(_main())
    except DomainException as exc:
        raise click.ClickException(str(exc))


def require_login(config: bootstrap.Settings) -> None:
    if not config.is_authenticated:
        raise click.ClickException(
            "You need to be logged in. Set STOREFRONT_API_TOKEN and try again."
        )
