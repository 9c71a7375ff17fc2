# Standardized Cosmos DB client implementation

import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Optional

from azure.core.exceptions import ServiceRequestError, ServiceResponseError
from azure.cosmos import CosmosClient, exceptions
from azure.cosmos.container import ContainerProxy
from azure.identity import DefaultAzureCredential

from src.shared.config import Settings, get_settings
from src.specs.common.errors import AccessDenied, ConfigurationError, NotFound, Unavailable

_AUTH_STATUS_CODES = (401, 403)


@contextmanager
def translate_cosmos_errors(resource_type: str, resource_id: str = "") -> Iterator[None]:
    """
    Map Cosmos SDK failures onto the application error taxonomy

    Args:
        resource_type: Entity kind used in NotFound messages ("Post", "Comment")
        resource_id: Identifier of the entity being read or written

    Raises:
        NotFound: The document does not exist
        AccessDenied: The account's authorization rules rejected the call
        Unavailable: Transport failure or any other backend error
    """
    try:
        yield
    except exceptions.CosmosResourceNotFoundError as e:
        raise NotFound(resource_type, resource_id) from e
    except exceptions.CosmosHttpResponseError as e:
        if e.status_code in _AUTH_STATUS_CODES:
            raise AccessDenied(
                "The document store rejected the request. Sign in again or check the database access rules.",
                details={"status": e.status_code, "resource": resource_type},
            ) from e
        raise Unavailable(
            "The document store could not complete the request. Please try again.",
            details={"status": e.status_code, "resource": resource_type},
        ) from e
    except (ServiceRequestError, ServiceResponseError) as e:
        raise Unavailable(
            "The document store is unreachable. Please try again.",
            details={"resource": resource_type, "error": str(e)},
        ) from e


class CosmosDBClient:
    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the Cosmos DB client from connection string or managed identity"""
        self.settings = settings or get_settings()
        self.database_name = self.settings.cosmos_database

        if not self.database_name:
            raise ConfigurationError("Missing Cosmos DB database name (COSMOS_DB_NAME)")

        if self.settings.cosmos_connection_string:
            self.client = CosmosClient.from_connection_string(self.settings.cosmos_connection_string)
            self.endpoint = self.settings.cosmos_connection_string.split(';')[0]
        elif self.settings.cosmos_endpoint:
            self.client = CosmosClient(self.settings.cosmos_endpoint, credential=DefaultAzureCredential())
            self.endpoint = self.settings.cosmos_endpoint
        else:
            raise ConfigurationError(
                "Missing Cosmos DB connection string or endpoint",
                details={"expected": ["COSMOS_DB_CONNECTION_STRING", "COSMOS_DB_ENDPOINT"]},
            )
        self.database = self.client.get_database_client(self.database_name)
        logging.getLogger("blog").info(
            "Cosmos client ready for database '%s' at %s", self.database_name, self.endpoint
        )

    def get_container(self, container_name: str) -> ContainerProxy:
        """
        Get a container by name

        Args:
            container_name: Name of the container

        Returns:
            ContainerProxy for the container
        """
        return self.database.get_container_client(container_name)

    def posts_container(self) -> ContainerProxy:
        return self.get_container(self.settings.posts_container)

    def comments_container(self) -> ContainerProxy:
        return self.get_container(self.settings.comments_container)


# Singleton instance with caching
@lru_cache(maxsize=1)
def get_cosmos_client() -> CosmosDBClient:
    """Get or create the singleton CosmosDBClient instance"""
    return CosmosDBClient()
