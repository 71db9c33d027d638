"""A MongoDB client with a start/stop lifecycle and thin collection helpers."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from bson import ObjectId
from pymongo import MongoClient
from pymongo import timeout as _operation_timeout
from pymongo.collection import Collection as _PyCollection
from pymongo.command_cursor import CommandCursor
from pymongo.database import Database
from pymongo.errors import BulkWriteError, WriteError
from pymongo.results import DeleteResult

from platformkit.errors import AppError, ErrorCode, ErrorList
from platformkit.logger import Logger
from platformkit.mongo_model import (
    Collection,
    DBIndex,
    DBIndexType,
    DBTextIndex,
    MongoConfig,
)

ERR_LOGGER_IS_REQUIRED = AppError("SYS", "Logger is required")
ERR_CONFIG_IS_REQUIRED = AppError("SYS", "Config is required")

DUPLICATE_UNIQUE_CONSTRAINT_ERROR_CODE: ErrorCode = "a15da443-001"

_DUPLICATE_KEY_CODE = 11000
_PING_TIMEOUT_SECONDS = 1.0

Context = Mapping[str, Any] | None


def err_duplicate_unique_constraint(cause: BaseException) -> AppError:
    """Build the error reported when a write breaks a unique index."""
    return AppError(
        DUPLICATE_UNIQUE_CONSTRAINT_ERROR_CODE,
        f"Duplicate unique constraint. Cause: {cause}",
    )


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _is_duplicate(exc: BaseException) -> bool:
    if isinstance(exc, BulkWriteError):
        details = exc.details or {}
        return any(
            item.get("code") == _DUPLICATE_KEY_CODE
            for item in details.get("writeErrors", [])
        )
    if isinstance(exc, WriteError):
        return exc.code == _DUPLICATE_KEY_CODE
    return False


def _object_id_hex(value: Any) -> str | None:
    return str(value) if isinstance(value, ObjectId) else None


def _index_type(value: Any) -> DBIndexType:
    try:
        return DBIndexType(int(value))
    except (TypeError, ValueError):
        return DBIndexType.ASC


class MongoDB:
    """Owns a client opened by :meth:`start`; every operation works on its database."""

    def __init__(self, config: MongoConfig, logger: Logger) -> None:
        self._config = config
        self._logger = logger
        self._client: MongoClient | None = None
        self._db: Database | None = None

    def start(self, ctx: Context) -> None:
        """Connect and ping the server; failures are logged and raised."""
        try:
            client = MongoClient(self._config.url)
        except Exception as exc:
            error = RuntimeError(
                f"Error creating mongo client. Cause: {_quote(str(exc))}"
            )
            self._logger.log_error(ctx, error)
            raise error from exc

        try:
            with _operation_timeout(_PING_TIMEOUT_SECONDS):
                client.admin.command("ping")
        except Exception as exc:
            client.close()
            error = RuntimeError(f"Mongo ping error. Cause: {_quote(str(exc))}")
            self._logger.log_error(ctx, error)
            raise error from exc

        self._client = client
        self._db = client.get_database(self._config.database)
        self._logger.log_info(ctx, "MongoDB connection is initialized")

    def stop(self, ctx: Context) -> None:
        if self._client is None:
            raise RuntimeError("MongoDB connection is not started")
        try:
            self._client.close()
        except Exception as exc:
            self._logger.log_error(ctx, exc)
            raise
        self._logger.log_info(ctx, "MongoDB connection is closed")

    def insert(self, ctx: Context, collection: Collection | str, data: Any) -> str:
        """Insert one document; return its ObjectId as hex, or "" for other ids."""
        try:
            result = self._collection(collection).insert_one(data)
        except Exception as exc:
            if _is_duplicate(exc):
                raise err_duplicate_unique_constraint(exc) from exc
            raise
        if result is None:
            return ""
        return _object_id_hex(result.inserted_id) or ""

    def insert_many(
        self, ctx: Context, collection: Collection | str, data: Iterable[Any]
    ) -> list[str]:
        """Insert documents; return the hex form of every ObjectId that was assigned."""
        try:
            result = self._collection(collection).insert_many(list(data))
        except Exception as exc:
            if _is_duplicate(exc):
                raise err_duplicate_unique_constraint(exc) from exc
            raise
        if result is None:
            return []
        hex_ids = (_object_id_hex(value) for value in result.inserted_ids or [])
        return [value for value in hex_ids if value is not None]

    def find_one_and_update(
        self,
        ctx: Context,
        collection: Collection | str,
        filter: Any,
        update: Any,
        **kwargs: Any,
    ) -> Any:
        """Update one document and return it; raise LookupError if none matched."""
        document = self._collection(collection).find_one_and_update(
            filter, update, **kwargs
        )
        if document is None:
            raise LookupError("mongo: no documents in result")
        return document

    def replace_one(
        self, ctx: Context, collection: Collection | str, filter: Any, data: Any
    ) -> None:
        self._collection(collection).replace_one(filter, data)

    def update_one(
        self,
        ctx: Context,
        collection: Collection | str,
        filter: Any,
        data: Any,
        **kwargs: Any,
    ) -> int:
        """Update one document and return the number modified."""
        result = self._collection(collection).update_one(filter, data, **kwargs)
        return result.modified_count

    def update_many(
        self,
        ctx: Context,
        collection: Collection | str,
        filter: Any,
        data: Any,
        **kwargs: Any,
    ) -> int:
        """Update matching documents and return the number modified."""
        result = self._collection(collection).update_many(filter, data, **kwargs)
        return result.modified_count

    def find(
        self, ctx: Context, collection: Collection | str, query: Any, **kwargs: Any
    ) -> list[Any]:
        return list(self._collection(collection).find(query, **kwargs))

    def find_one(
        self, ctx: Context, collection: Collection | str, query: Any, **kwargs: Any
    ) -> Any:
        """Return the first matching document; raise LookupError if none matched."""
        document = self._collection(collection).find_one(query, **kwargs)
        if document is None:
            raise LookupError("mongo: no documents in result")
        return document

    def delete_one(
        self, ctx: Context, collection: Collection | str, filter: Any, **kwargs: Any
    ) -> DeleteResult:
        return self._collection(collection).delete_one(filter, **kwargs)

    def delete_many(
        self, ctx: Context, collection: Collection | str, filter: Any, **kwargs: Any
    ) -> DeleteResult:
        return self._collection(collection).delete_many(filter, **kwargs)

    def count(
        self, ctx: Context, collection: Collection | str, query: Any, **kwargs: Any
    ) -> int:
        return self._collection(collection).count_documents(query, **kwargs)

    def aggregate(
        self, ctx: Context, collection: Collection | str, pipeline: Sequence[Any]
    ) -> CommandCursor:
        return self._collection(collection).aggregate(list(pipeline))

    def create_index(self, ctx: Context, index: DBIndex) -> str:
        """Create an index with every key in the index's direction; return its name."""
        keys = [(key, int(index.type)) for key in index.keys]
        options: dict[str, Any] = {"name": index.name}
        if index.uniq:
            options["unique"] = True
        return self._collection(index.collection).create_index(keys, **options)

    def create_text_index(self, ctx: Context, index: DBTextIndex) -> str:
        """Create a text index over every key; return its name."""
        keys = [(key, "text") for key in index.keys]
        return self._collection(index.collection).create_index(keys, name=index.name)

    def collection_indexes(
        self, ctx: Context, collection: Collection | str
    ) -> dict[str, DBIndex]:
        """Return the collection's indexes by name."""
        indexes: dict[str, DBIndex] = {}
        for document in self._collection(collection).list_indexes():
            key_spec = dict(document.get("key", {}))
            first_direction = next(iter(key_spec.values()), DBIndexType.ASC)
            index = DBIndex(
                collection=Collection(str(collection)),
                name=document.get("name", ""),
                keys=list(key_spec),
                type=_index_type(first_direction),
                uniq=bool(document.get("unique", False)),
            )
            indexes[index.name] = index
        return indexes

    def try_create_index(self, ctx: Context, index: DBIndex) -> None:
        """Create the index unless one with the same name already exists."""
        existing = self.collection_indexes(ctx, index.collection)
        if index.name in existing:
            return
        self.create_index(ctx, index)

    def _collection(self, name: Collection | str) -> _PyCollection:
        if self._db is None:
            raise RuntimeError("MongoDB connection is not started")
        return self._db.get_collection(str(name))


class MongoBuilder:
    """Collects the required parts and builds a :class:`MongoDB`."""

    def __init__(self) -> None:
        self._logger: Logger | None = None
        self._config: MongoConfig | None = None

    def logger(self, logger: Logger | None) -> MongoBuilder:
        self._logger = logger
        return self

    def config(self, config: MongoConfig | None) -> MongoBuilder:
        self._config = config
        return self

    def build(self) -> MongoDB:
        """Build the component; raise ErrorList naming every missing part."""
        errors = ErrorList()
        if self._logger is None:
            errors.add_error(ERR_LOGGER_IS_REQUIRED)
        if self._config is None:
            errors.add_error(ERR_CONFIG_IS_REQUIRED)
        if errors.is_present():
            raise errors
        return MongoDB(self._config, self._logger)