from collections.abc import Iterable, Mapping
from typing import Any

from steamsearch.types import Manifest, ProductInfo
from steamsearch.utils import as_flag, as_int, as_text, dig

__all__ = ["depot_manifests", "branch_manifests", "sort_manifests", "extract_manifests"]


def _manifest_id(value: Any) -> str | None:
    text = as_text(value)
    return text if text and text.isdigit() else None


def depot_manifests(depot: Any) -> list[Manifest]:
    """Manifests listed on the depot itself, keyed by manifest id"""
    table = dig(depot, "manifests")
    if not isinstance(table, Mapping):
        return []
    manifests: list[Manifest] = []
    for key, details in table.items():
        # branch keyed entries ("public": {"gid": ...}) belong to the branch listing
        if not (manifest_id := _manifest_id(key)):
            continue
        manifests.append(
            Manifest(
                manifest_id,
                as_text(dig(details, "buildid")) or "Unknown",
                None,
                True,
                True,
                "Depot manifest",
                as_int(dig(details, "date")),
                as_int(dig(details, "size")),
            )
        )
    return manifests


def branch_manifests(depots: Any, depot_id: str) -> list[Manifest]:
    """One manifest per branch that has a build, resolved for the given depot"""
    branches = dig(depots, "branches")
    if not isinstance(branches, Mapping):
        return []
    manifests: list[Manifest] = []
    for name, branch in branches.items():
        if not (build_id := as_text(dig(branch, "buildid"))):
            continue
        manifest_id = (
            _manifest_id(dig(branch, "depots", depot_id, "manifest"))
            or _manifest_id(dig(depots, depot_id, "manifests", name, "gid"))
            or build_id
        )
        manifests.append(
            Manifest(
                manifest_id,
                build_id,
                str(name),
                as_flag(dig(branch, "public")),
                False,
                as_text(dig(branch, "description")),
                as_int(dig(branch, "timeupdated")),
            )
        )
    return manifests


def sort_manifests(manifests: Iterable[Manifest]) -> list[Manifest]:
    """Newest first, undated entries last with current branches ahead of historical ones"""

    def key(manifest: Manifest):
        if manifest.time_updated is not None:
            return (0, -manifest.time_updated, 0)
        return (1, 0, int(manifest.is_historical))

    return sorted(manifests, key=key)


def extract_manifests(product: ProductInfo, depot_id: str) -> list[Manifest]:
    depots = product.data.get("depots")
    if not isinstance(depots, Mapping):
        return []
    depot_id = str(depot_id)
    return sort_manifests([*depot_manifests(depots.get(depot_id)), *branch_manifests(depots, depot_id)])
