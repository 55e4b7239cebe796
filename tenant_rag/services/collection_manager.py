"""Tenant collection naming and idempotent provisioning.

Every tenant owns exactly one vector collection named
``<prefix><tenant_id>`` (``partner_acme`` by default).  The vector store has
no tenant boundary of its own, so this module is the single place where a
tenant id becomes a collection name, and it refuses ids that could escape
their namespace.
"""

from __future__ import annotations

import re

import structlog

from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
from tenant_rag.models.rag import CollectionStats
from tenant_rag.utils.errors import CollectionProvisionError, InvalidTenantError

logger = structlog.get_logger(logger_name=__name__)

_TENANT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
MAX_TENANT_ID_LENGTH = 50


def validate_tenant_id(tenant_id: str) -> str:
    """Return *tenant_id* unchanged if it is namespace-safe.

    Raises
    ------
    InvalidTenantError
        If the id is empty, longer than 50 characters, or contains anything
        other than letters, digits, ``_`` and ``-``.
    """
    if not isinstance(tenant_id, str) or not tenant_id:
        raise InvalidTenantError(message="Tenant id is required")
    if len(tenant_id) > MAX_TENANT_ID_LENGTH:
        raise InvalidTenantError(
            message=f"Tenant id exceeds {MAX_TENANT_ID_LENGTH} characters"
        )
    if not _TENANT_ID_PATTERN.match(tenant_id):
        raise InvalidTenantError(
            message="Tenant id may only contain letters, digits, '_' and '-'"
        )
    return tenant_id


class CollectionManager:
    """Maps tenants to collections and provisions them on first use.

    Parameters
    ----------
    vector_store:
        Backend holding the collections.
    dimension:
        Vector size of the active embedding provider.  New collections are
        created with it and existing ones are checked against it.
    prefix:
        Prepended to the tenant id to form the collection name.
    """

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        dimension: int,
        prefix: str = "partner_",
    ) -> None:
        self._vector_store = vector_store
        self._dimension = dimension
        self._prefix = prefix

    def collection_name(self, tenant_id: str) -> str:
        """Return the deterministic collection name for *tenant_id*."""
        return f"{self._prefix}{validate_tenant_id(tenant_id)}"

    async def ensure_collection_exists(self, tenant_id: str) -> str:
        """Make sure the tenant's collection exists and return its name.

        Safe under concurrent first use: if another request creates the
        collection between our check and our create, the store reports
        "already exists" and that is treated as success.

        Raises
        ------
        InvalidTenantError
            If *tenant_id* is not namespace-safe.
        CollectionProvisionError
            If the store fails, or the existing collection was built for a
            different vector dimension.
        """
        name = self.collection_name(tenant_id)

        try:
            if not await self._vector_store.collection_exists(name):
                created = await self._vector_store.create_collection(name, self._dimension)
                logger.info(
                    "collection_provisioned",
                    tenant_id=tenant_id,
                    collection=name,
                    created=created,
                    dimension=self._dimension,
                )
                if created:
                    return name

            info = await self._vector_store.get_collection_info(name)
        except CollectionProvisionError:
            raise
        except Exception as exc:
            raise CollectionProvisionError(
                message=f"Could not provision collection {name}: {exc}",
                provider_name=self._vector_store.get_provider_name(),
            ) from exc

        if info is not None and info.dimension is not None and info.dimension != self._dimension:
            logger.error(
                "collection_dimension_mismatch",
                tenant_id=tenant_id,
                collection=name,
                stored_dim=info.dimension,
                expected_dim=self._dimension,
            )
            raise CollectionProvisionError(
                message=(
                    f"Collection {name} holds {info.dimension}-dim vectors but the "
                    f"embedding provider produces {self._dimension}-dim vectors"
                ),
                provider_name=self._vector_store.get_provider_name(),
            )
        return name

    async def get_stats(self, tenant_id: str) -> CollectionStats:
        """Return vector count and dimension of the tenant's collection."""
        name = self.collection_name(tenant_id)
        info = await self._vector_store.get_collection_info(name)
        if info is None:
            return CollectionStats(collection_name=name, exists=False)
        return CollectionStats(
            collection_name=name,
            exists=True,
            vector_count=info.vector_count,
            dimension=info.dimension,
        )

    async def delete_collection(self, tenant_id: str) -> bool:
        """Drop the tenant's collection.  A missing collection is not an error."""
        name = self.collection_name(tenant_id)
        deleted = await self._vector_store.delete_collection(name)
        logger.info("collection_deleted", tenant_id=tenant_id, collection=name, deleted=deleted)
        return deleted
