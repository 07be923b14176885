"""Neo4j Client — CypherRunner over the official async driver.

Invariants:
    - One driver per runner, created lazily, closed via close()
    - Records are returned as plain dicts (record.data())
    - Driver and Cypher failures raise GraphDatabaseError
"""

import logging
from typing import Any

from neo4j import AsyncDriver, AsyncGraphDatabase
from neo4j.exceptions import Neo4jError, ServiceUnavailable

from app.core.errors import GraphDatabaseError

logger = logging.getLogger(__name__)


class Neo4jCypherRunner:

    def __init__(self, uri: str, user: str, password: str):
        self.uri = uri
        self._auth = (user, password)
        self._driver: AsyncDriver | None = None

    def _get_driver(self) -> AsyncDriver:
        if self._driver is None:
            self._driver = AsyncGraphDatabase.driver(self.uri, auth=self._auth)
        return self._driver

    async def run(
        self, query: str, params: dict[str, Any] | None = None,
    ) -> list[dict]:
        try:
            async with self._get_driver().session() as session:
                result = await session.run(query, params or {})
                records = [record.data() async for record in result]
        except (Neo4jError, ServiceUnavailable, OSError) as e:
            logger.warning("Cypher query failed on %s: %s", self.uri, e)
            raise GraphDatabaseError(str(e)) from e
        logger.info("Cypher query returned %d records", len(records))
        return records

    async def close(self) -> None:
        if self._driver is not None:
            await self._driver.close()
            self._driver = None
