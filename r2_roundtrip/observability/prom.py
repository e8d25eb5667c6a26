"""
Prometheus metrics exporter for the R2 round-trip workflow.
"""

import logging

from prometheus_client import REGISTRY, Counter, Histogram, start_http_server
from prometheus_client import Enum as StateEnum

from r2_roundtrip.common.state_manager import WorkflowState
from r2_roundtrip.persistence.record import WorkflowEvent

logger = logging.getLogger(__name__)

# Direction of the bytes counted for each operation
DIRECTIONS = {
    'PutObject': 'upload',
    'GetObject': 'download',
}


class PrometheusExporter:
    """Prometheus metrics exporter, fed by workflow events."""

    def __init__(self, port: int = 9100, registry=REGISTRY):
        self.port = port
        self.registry = registry
        self.server_started = False

        self.operations_total = Counter(
            'r2_roundtrip_operations_total', 'Workflow operations by outcome',
            ['operation', 'status'], registry=registry,
        )
        self.operation_duration = Histogram(
            'r2_roundtrip_operation_duration_seconds', 'Operation duration',
            ['operation'], registry=registry,
        )
        self.bytes_transferred = Counter(
            'r2_roundtrip_bytes_transferred_total', 'Object bytes moved',
            ['direction'], registry=registry,
        )
        self.workflow_state = StateEnum(
            'r2_roundtrip_workflow_state', 'Current workflow state',
            states=[state.value for state in WorkflowState], registry=registry,
        )

    def start_server(self):
        """Start the Prometheus HTTP server."""
        if not self.server_started:
            try:
                start_http_server(self.port, registry=self.registry)
                self.server_started = True
                logger.info(f"Prometheus server started on port {self.port}")
            except OSError as e:
                logger.error(f"Failed to start Prometheus server: {e}")

    def handle(self, event: WorkflowEvent) -> None:
        """Event sink entry point."""
        self.operations_total.labels(operation=event.operation, status=event.status).inc()
        if event.elapsed_seconds:
            self.operation_duration.labels(operation=event.operation).observe(event.elapsed_seconds)
        direction = DIRECTIONS.get(event.operation)
        if direction and event.bytes and not event.failed:
            self.bytes_transferred.labels(direction=direction).inc(event.bytes)
        self.workflow_state.state(event.state)
