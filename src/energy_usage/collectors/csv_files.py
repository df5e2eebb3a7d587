"""Local CSV partition reader.

Reads the day partitions from a directory tree laid out as described in
``collectors.base``.
"""

import logging
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from ..exceptions import RetrievalError
from ..models import DataType, EnergyType
from .base import parse_rows, partition_path

logger = logging.getLogger(__name__)


class CsvRecordSource:
    """Retrieve raw records from CSV files under a data directory."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def retrieve(
        self,
        user_id: str,
        energy_type: EnergyType,
        data_type: DataType,
        dates: Sequence[date],
    ) -> list[dict]:
        """Read the partitions for the given days, in the order given.

        A missing partition file contributes no rows. A missing data
        directory or an unreadable file raises RetrievalError.
        """
        if not self.data_dir.is_dir():
            raise RetrievalError(f"Data directory not found: {self.data_dir}")

        rows = []
        for day in dates:
            path = self.data_dir / partition_path(user_id, energy_type, data_type, day)
            if not path.exists():
                logger.debug("No partition at %s", path)
                continue

            try:
                with open(path, newline="", encoding="utf-8") as f:
                    partition = parse_rows(f, str(path))
            except (OSError, UnicodeDecodeError) as e:
                raise RetrievalError(f"Could not read {path}: {e}") from e

            logger.debug("Read %d rows from %s", len(partition), path)
            rows.extend(partition)
        return rows
