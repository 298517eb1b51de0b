"""
Artifact Store

Predicate-based reads over the MongoDB artifact collection. pymongo is
synchronous, so each call runs in a worker thread to keep the event loop free.
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional, TypeVar

from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from artifact_search.core.exceptions import StoreUnavailableException
from artifact_search.schemas.artifact import Artifact
from artifact_search.search.predicates import Predicate, MATCH_ALL, ID_FIELD, to_mongo

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Largest skip a find command can carry (BSON int64)
MAX_SKIP = 2 ** 63 - 1


class ArtifactStore:
    """
    Reader for artifact documents.

    Results come back in the store's natural order, made deterministic by
    sorting on _id so that skip/limit pages never overlap.
    """

    STORE_NAME = "artifact_store"

    def __init__(self, collection: Collection):
        self.collection = collection

    async def _run(self, operation: str, call: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(call)
        except PyMongoError as e:
            logger.error(f"Artifact store failed during {operation}: {e}")
            raise StoreUnavailableException(
                message=f"Artifact store unavailable during {operation}",
                store=self.STORE_NAME,
                operation=operation
            ) from e

    async def find(
        self,
        predicate: Predicate = MATCH_ALL,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Artifact]:
        """Artifacts matching the predicate; no limit returns every match"""
        query = to_mongo(predicate)

        def fetch() -> List[dict]:
            cursor = self.collection.find(query).sort(ID_FIELD, ASCENDING)
            if skip:
                cursor = cursor.skip(skip)
            if limit is not None:
                cursor = cursor.limit(limit)
            return list(cursor)

        documents = await self._run("find", fetch)
        return [Artifact.from_document(doc) for doc in documents]

    async def count(self, predicate: Predicate = MATCH_ALL) -> int:
        query = to_mongo(predicate)
        return await self._run("count", lambda: self.collection.count_documents(query))

    async def get(self, predicate: Predicate) -> Optional[Artifact]:
        query = to_mongo(predicate)
        document = await self._run("get", lambda: self.collection.find_one(query))
        return Artifact.from_document(document) if document else None

    async def distinct(self, field: str, predicate: Predicate = MATCH_ALL) -> List[Any]:
        query = to_mongo(predicate)
        return await self._run("distinct", lambda: self.collection.distinct(field, query))

    async def ping(self) -> None:
        """Round-trip to the server; raises StoreUnavailableException on failure"""
        await self._run("ping", lambda: self.collection.database.command("ping"))
