"""Remote CSV partition reader.

Fetches the same day partitions as ``CsvRecordSource`` from a static file
server or object store exposed over HTTP, e.g.

    https://data.example.com/energy/<user_id>/electricity/consumption/1/20240101-20240102.csv
"""

import logging
from collections.abc import Sequence
from datetime import date

import httpx

from ..exceptions import RetrievalError
from ..models import DataType, EnergyType
from .base import parse_rows, partition_path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 2


class HttpRecordSource:
    """Retrieve raw records from CSV partitions served over HTTP.

    Args:
        base_url: URL of the data root
        timeout: Per-request timeout in seconds
        retries: Connection retries handled by the transport
        transport: Optional httpx transport, replaces the retrying default
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self.transport = transport

    def retrieve(
        self,
        user_id: str,
        energy_type: EnergyType,
        data_type: DataType,
        dates: Sequence[date],
    ) -> list[dict]:
        """Fetch the partitions for the given days, in the order given.

        A 404 contributes no rows. Any other HTTP or network error raises
        RetrievalError.
        """
        rows = []
        transport = self.transport or httpx.HTTPTransport(retries=self.retries)
        with httpx.Client(timeout=self.timeout, transport=transport) as client:
            for day in dates:
                url = f"{self.base_url}/{partition_path(user_id, energy_type, data_type, day)}"
                try:
                    response = client.get(url)
                    if response.status_code == 404:
                        logger.debug("No partition at %s", url)
                        continue
                    response.raise_for_status()
                except httpx.HTTPStatusError as e:
                    raise RetrievalError(
                        f"HTTP error fetching {url}: {e.response.status_code}"
                    ) from e
                except httpx.HTTPError as e:
                    raise RetrievalError(f"Network error fetching {url}: {e}") from e

                partition = parse_rows(response.text.splitlines(), url)
                logger.debug("Fetched %d rows from %s", len(partition), url)
                rows.extend(partition)
        return rows
