"""Prometheus metrics exposed by the collection store and the mail relay."""

from prometheus_client import Counter, CollectorRegistry, generate_latest


class StoreMetrics:
    """Counters describing collection store activity."""

    def __init__(self, registry: CollectorRegistry | None = None):
        """Create counters inside the provided registry."""
        self.registry = registry or CollectorRegistry()
        self.operations = Counter(
            "jdm_store_operations_total", "Total store operations", ["operation"], registry=self.registry
        )
        self.errors = Counter(
            "jdm_store_errors_total", "Total failed store operations", ["operation"], registry=self.registry
        )
        self.backups = Counter("jdm_backups_total", "Total backup files written", registry=self.registry)

    def inc_operation(self, operation: str):
        """Increase the ``operations`` counter for ``operation``."""
        self.operations.labels(operation=operation).inc()

    def inc_error(self, operation: str):
        """Increase the ``errors`` counter for ``operation``."""
        self.errors.labels(operation=operation).inc()

    def inc_backup(self):
        self.backups.inc()

    def generate_latest(self) -> bytes:
        """Return the latest metrics snapshot in Prometheus text format."""
        return generate_latest(self.registry)


class RelayMetrics:
    """Counters describing mail relay activity."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()
        self.sent = Counter("jdm_sent_total", "Total relayed emails", registry=self.registry)
        self.errors = Counter("jdm_send_errors_total", "Total relay failures", registry=self.registry)
        self.attachments = Counter(
            "jdm_attachments_total", "Total attachments relayed", ["content_type"], registry=self.registry
        )

    def inc_sent(self):
        self.sent.inc()

    def inc_error(self):
        self.errors.inc()

    def inc_attachment(self, content_type: str):
        """Increase the ``attachments`` counter for the given content type."""
        self.attachments.labels(content_type=content_type).inc()

    def generate_latest(self) -> bytes:
        """Return the latest metrics snapshot in Prometheus text format."""
        return generate_latest(self.registry)
