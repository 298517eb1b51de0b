"""
MongoDB client management for the artifact store
"""

from functools import lru_cache
import logging

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConfigurationError

from artifact_search.core.config import settings
from artifact_search.core.exceptions import ConfigurationException

logger = logging.getLogger(__name__)


@lru_cache
def get_mongo_client() -> MongoClient:
    """Process-wide client; pymongo connects lazily and pools internally"""
    try:
        client = MongoClient(
            settings.MONGODB_URL,
            serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
            tz_aware=False
        )
    except ConfigurationError as e:
        raise ConfigurationException(
            message=f"Invalid MongoDB configuration: {e}",
            config_key="MONGODB_URL"
        ) from e
    logger.info(f"MongoDB client created for database '{settings.MONGODB_DATABASE}'")
    return client


def get_artifact_collection() -> Collection:
    return get_mongo_client()[settings.MONGODB_DATABASE][settings.MONGODB_COLLECTION]


def close_mongo_client():
    """Close the cached client on shutdown"""
    if get_mongo_client.cache_info().currsize:
        get_mongo_client().close()
        get_mongo_client.cache_clear()
        logger.info("MongoDB client closed")
