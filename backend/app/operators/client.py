"""HTTP client construction for the POST operator."""
from __future__ import annotations

import logging
import ssl
import warnings
from collections.abc import Callable
from typing import TYPE_CHECKING

import requests
import urllib3
from requests.adapters import DEFAULT_POOLBLOCK, DEFAULT_POOLSIZE, HTTPAdapter

if TYPE_CHECKING:
    from .http_post import HttpPostSettings

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., requests.Session]


class TrustAllAdapter(HTTPAdapter):
    """Transport adapter that skips certificate chain and hostname checks.

    Only meant for talking to test endpoints with self-signed certificates.
    """

    def init_poolmanager(self, connections, maxsize, block=DEFAULT_POOLBLOCK, **pool_kwargs):
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        pool_kwargs["ssl_context"] = context
        pool_kwargs["assert_hostname"] = False
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)

    def send(self, request, *args, **kwargs):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", urllib3.exceptions.InsecureRequestWarning)
            return super().send(request, *args, **kwargs)


def is_tls_url(url: str) -> bool:
    """Return whether the URL asks for a TLS connection."""
    return url.startswith("https:")


def build_http_client(
    url: str,
    *,
    trust_all: bool = False,
    pool_maxsize: int = DEFAULT_POOLSIZE,
    pool_block: bool = DEFAULT_POOLBLOCK,
) -> requests.Session:
    """Return a plain or TLS session suited to the given URL."""

    session = requests.Session()
    # Proxy settings from the environment are not honoured.
    session.trust_env = False

    if is_tls_url(url) and trust_all:
        session.verify = False
        adapter: HTTPAdapter = TrustAllAdapter(
            pool_maxsize=pool_maxsize, pool_block=pool_block
        )
        session.mount("https://", adapter)
    elif is_tls_url(url):
        session.mount(
            "https://", HTTPAdapter(pool_maxsize=pool_maxsize, pool_block=pool_block)
        )
    else:
        session.mount(
            "http://", HTTPAdapter(pool_maxsize=pool_maxsize, pool_block=pool_block)
        )
    return session


def create_client(
    settings: HttpPostSettings, factory: ClientFactory = build_http_client
) -> requests.Session | None:
    """Build the operator's client, degrading to a plain one on failure."""

    try:
        return factory(settings.url, trust_all=settings.trust_all_certificates)
    except Exception:
        logger.exception("Unable to build an HTTP client for %s; falling back to a plain client", settings.url)

    try:
        return factory(settings.url, trust_all=False)
    except Exception:
        logger.exception(
            "We have no valid HTTP client. Incoming records arriving for HTTP POST will be ignored."
        )
        return None
