"""
Parquet persistence for workflow events.
"""

import os
import logging
from typing import List, Optional
from datetime import datetime

import pandas as pd

from r2_roundtrip.persistence.record import WorkflowEvent

logger = logging.getLogger(__name__)


class ParquetPersistence:
    """Parquet file persistence for workflow events.

    Events are kept in memory while the workflow runs and written to a
    single Parquet file at the end.

    Attributes:
        output_dir: Directory where Parquet files will be saved
        records: Events accumulated during the run
    """

    def __init__(self, output_dir: str = "results"):
        """Initialize Parquet persistence.

        Args:
            output_dir: Directory for saving Parquet files (default: 'results')
        """
        self.output_dir: str = output_dir
        self.records: List[WorkflowEvent] = []

        os.makedirs(output_dir, exist_ok=True)

    def handle(self, event: WorkflowEvent) -> None:
        """Event sink entry point."""
        self.store_record(event)

    def store_record(self, record: WorkflowEvent) -> None:
        """Store an event in memory.

        Args:
            record: Workflow event to store
        """
        self.records.append(record)

    def save_to_file(self, filename_prefix: str = "events") -> Optional[str]:
        """Save all events to a Parquet file.

        Args:
            filename_prefix: Prefix for the generated filename (default: 'events')

        Returns:
            Path to the saved file, or None if no events to save
        """
        if not self.records:
            return None

        logger.info(f"Saving {len(self.records)} events to file")
        df = pd.DataFrame([record.to_dict() for record in self.records])

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"{filename_prefix}_{timestamp}.parquet"
        filepath = os.path.join(self.output_dir, filename)

        df.to_parquet(filepath, index=False)

        return filepath
