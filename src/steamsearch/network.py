from collections.abc import Mapping
from typing import Any

import requests
from steam.client import SteamClient
from steam.enums import EResult

from steamsearch import ui
from steamsearch.errors import AuthError, NetworkError, ProductLookupError, ValidationError
from steamsearch.types import Application, ProductInfo
from steamsearch.utils import as_int, dig

__all__ = ["SearchService", "CatalogClient", "parse_application"]

STORE_SEARCH_URL = "https://store.steampowered.com/api/storesearch"

# the storefront answers default client headers with empty pages
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36"
)


def initialize_store_session():
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})
    return session


def parse_application(item: Mapping[str, Any]) -> Application | None:
    app_id = as_int(item.get("id"))
    if app_id is None or app_id <= 0:
        return None
    price = item.get("price")
    final = as_int(dig(price, "final"))
    return Application(
        app_id,
        str(item.get("name") or ""),
        str(item.get("type") or ""),
        final / 100 if final is not None else 0.0,
        as_int(dig(price, "discount_percent")) or 0,
        str(item.get("tiny_image") or ""),
    )


class SearchService:
    def __init__(
        self,
        session: requests.Session | None = None,
        language: str = "english",
        country: str = "US",
        timeout: float = 10.0,
    ):
        self.session = session if session is not None else initialize_store_session()
        self.language = language
        self.country = country
        self.timeout = timeout

    def search(self, term: str) -> list[Application]:
        if not term or not term.strip():
            raise ValidationError("Please enter a game name to search")
        term = term.strip()

        ui.info(f"Searching for games matching: {term}")
        try:
            response = self.session.get(
                STORE_SEARCH_URL,
                params={"term": term, "l": self.language, "cc": self.country},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as ex:
            raise NetworkError(f"Error searching Steam: {ex}") from ex
        except ValueError as ex:
            raise NetworkError(f"Error searching Steam: malformed response ({ex})") from ex

        items = payload.get("items") if isinstance(payload, Mapping) else None
        if not items:
            ui.warning("No matching games found.")
            return []
        return [app for item in items if isinstance(item, Mapping) and (app := parse_application(item))]


class CatalogClient:
    """Owns the Steam session used for product info lookups"""

    def __init__(self, client: SteamClient | None = None, timeout: float = 15.0):
        self.client = client if client is not None else SteamClient()
        self.timeout = timeout
        self.logged_in = False

    def login(self):
        if self.logged_in:
            return
        ui.info("Logging in anonymously to Steam...")
        # connect() retries forever with its default of 0, one attempt here
        try:
            if not self.client.connected and not self.client.connect(retry=1):
                raise AuthError("Error logging in: could not connect to Steam")
            # blocks until the session reports either logon or an error
            result = self.client.anonymous_login()
        except AuthError:
            raise
        except Exception as ex:
            raise AuthError(f"Error logging in: {ex}") from ex
        if result != EResult.OK:
            raise AuthError(f"Error logging in: {getattr(result, 'name', result)}")
        self.logged_in = True
        ui.success("Successfully logged in anonymously")

    def logout(self):
        was_logged_in, self.logged_in = self.logged_in, False
        try:
            if self.client.logged_on:
                self.client.logout()
            if self.client.connected:
                self.client.disconnect()
        except Exception as ex:
            ui.warning(f"Failed to log out cleanly: {ex}")
            return
        if was_logged_in:
            ui.info("Logged out of Steam.")

    def fetch_product(self, app_id: int) -> ProductInfo:
        ui.info(f"Fetching product information for app {app_id}...")
        try:
            product_info = self.client.get_product_info((app_id,), auto_access_tokens=False, timeout=self.timeout)
        except Exception as ex:
            raise ProductLookupError(f"Could not fetch product information for app {app_id}: {ex}") from ex
        if product_info is None:
            raise ProductLookupError(f"No response from Steam for app {app_id}")
        app = dig(product_info, "apps", app_id)
        if not isinstance(app, Mapping) or not app:
            raise ProductLookupError(f"No product information found for app {app_id}")
        return ProductInfo(app_id, dict(app))
