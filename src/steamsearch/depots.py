from collections.abc import Mapping
from typing import Any

from steamsearch.types import Depot, DepotFlag, OsClassification, OsType, OtherOs, ProductInfo
from steamsearch.utils import as_flag, as_int, as_text, dig

__all__ = ["app_depot", "classify_os", "declared_depots", "extract_depots", "parse_depot_id"]

_OSLIST_PRIORITY = (
    ("windows", OsType.WINDOWS),
    ("macos", OsType.MAC),
    ("linux", OsType.LINUX),
)

_FLAG_KEYS = (
    ("optional", DepotFlag.OPTIONAL),
    ("systemdefined", DepotFlag.SYSTEM_DEFINED),
    ("sharedinstall", DepotFlag.SHARED_INSTALL),
)


def parse_depot_id(key: Any) -> int | None:
    if key == "branches":
        return None
    if isinstance(key, str) and not key.strip().isdigit():
        return None
    depot_id = as_int(key)
    if depot_id is None or depot_id <= 0:
        return None
    return depot_id


def _oslist(depot: Mapping[str, Any]) -> tuple[set[str], str] | None:
    raw = dig(depot, "config", "oslist")
    match raw:
        case str():
            entries = {entry.strip().lower() for entry in raw.split(",")}
        case list() | tuple() | set() | frozenset():
            entries = {str(entry).strip().lower() for entry in raw}
            raw = ",".join(str(entry) for entry in raw)
        case _:
            return None
    entries.discard("")
    if not entries:
        return None
    return entries, raw


def classify_os(depot: Mapping[str, Any]) -> OsClassification:
    if oslist := _oslist(depot):
        entries, raw = oslist
        for key, os_type in _OSLIST_PRIORITY:
            if key in entries:
                return os_type
        return OtherOs(raw)

    name = depot.get("name")
    if isinstance(name, str):
        name = name.lower()
        if "windows" in name:
            return OsType.WINDOWS
        if "mac" in name or "osx" in name:
            return OsType.MAC
        if "linux" in name:
            return OsType.LINUX

    return OsType.UNKNOWN


def _depot(depot_id: int, depot: Mapping[str, Any]) -> Depot:
    return Depot(
        str(depot_id),
        as_text(depot.get("name")) or f"Depot {depot_id}",
        classify_os(depot),
        as_int(depot.get("dlcappid")),
        as_int(depot.get("maxsize")),
        as_int(depot.get("encryptedsize")),
        as_text(dig(depot, "config", "language")),
        frozenset(flag for key, flag in _FLAG_KEYS if as_flag(depot.get(key))),
    )


def declared_depots(product: ProductInfo) -> list[Depot]:
    """Depots listed in the app's depot table"""
    depots: list[Depot] = []
    table = product.data.get("depots")
    if isinstance(table, Mapping):
        for key, depot in table.items():
            if (depot_id := parse_depot_id(key)) is None or not isinstance(depot, Mapping):
                continue
            depots.append(_depot(depot_id, depot))

    return depots


def app_depot(product: ProductInfo) -> Depot:
    """The app itself standing in as its only depot"""
    name = as_text(dig(product.data, "common", "name")) or f"App {product.app_id}"
    return Depot(str(product.app_id), name)


def extract_depots(product: ProductInfo) -> list[Depot]:
    """Depots of an app, or the app itself when it declares none"""
    return declared_depots(product) or [app_depot(product)]
