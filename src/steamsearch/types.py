from enum import StrEnum
from typing import Any, NamedTuple

__all__ = [
    "Application",
    "OsType",
    "OtherOs",
    "OsClassification",
    "DepotFlag",
    "Depot",
    "Manifest",
    "ProductInfo",
    "RawData",
    "RenderedCommand",
]

type RawData = dict[str, Any]


class Application(NamedTuple):
    id: int
    name: str
    kind: str
    price: float
    discount_percent: int
    thumbnail_url: str


class OsType(StrEnum):
    WINDOWS = "Windows"
    MAC = "Mac"
    LINUX = "Linux"
    UNKNOWN = "Unknown"


class OtherOs(NamedTuple):
    """Explicit OS list value that is none of the known platforms"""

    value: str

    def __str__(self) -> str:
        return self.value


type OsClassification = OsType | OtherOs


class DepotFlag(StrEnum):
    OPTIONAL = "Optional"
    SYSTEM_DEFINED = "System Defined"
    SHARED_INSTALL = "Shared Install"


class Depot(NamedTuple):
    id: str
    name: str
    os: OsClassification = OsType.UNKNOWN
    dlc_app_id: int | None = None
    max_size: int | None = None
    encrypted_size: int | None = None
    language: str | None = None
    flags: frozenset[DepotFlag] = frozenset()


class Manifest(NamedTuple):
    manifest_id: str
    build_id: str
    branch: str | None = None
    is_public: bool = True
    is_historical: bool = False
    description: str | None = None
    time_updated: int | None = None
    size: int | None = None


class ProductInfo(NamedTuple):
    app_id: int
    data: RawData


class RenderedCommand(NamedTuple):
    command: str
    annotated_command: str
