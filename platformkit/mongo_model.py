"""Value types describing MongoDB collections, configuration and indexes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from platformkit.errors import AppError

ERR_COLLECTION_VALUE_IS_REQUIRED = AppError(
    "135bc16c-001", "Value for mongo collection is required"
)


class Collection(str):
    """The name of a MongoDB collection."""

    def __str__(self) -> str:
        return str.__str__(self)


def collection_from(value: str) -> Collection:
    """Return ``value`` as a collection name; raise AppError if it is empty."""
    if not value:
        raise ERR_COLLECTION_VALUE_IS_REQUIRED
    return Collection(value)


@dataclass
class MongoConfig:
    url: str = ""
    database: str = ""


class DBIndexType(IntEnum):
    ASC = 1
    DESC = -1


@dataclass
class DBIndex:
    collection: Collection = Collection("")
    name: str = ""
    keys: list[str] = field(default_factory=list)
    type: DBIndexType = DBIndexType.ASC
    uniq: bool = False


@dataclass
class DBTextIndex:
    collection: str = ""
    name: str = ""
    keys: list[str] = field(default_factory=list)