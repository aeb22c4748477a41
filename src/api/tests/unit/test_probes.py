"""Unit tests for domain probes.

Tests that domain probes correctly capture domain events
following the Domain Oriented Observability pattern.
"""

from unittest.mock import MagicMock

import structlog

from demo.application.observability import DefaultPopulationProbe
from infrastructure.observability import ObservationContext
from infrastructure.observability.probes import DefaultRemoteStoreProbe
from people.application.observability import (
    DefaultBulkLoaderProbe,
    DefaultDashboardLoadProbe,
    DefaultPaginationProbe,
    DefaultTenantResolverProbe,
)


class TestRemoteStoreProbe:
    """Tests for RemoteStoreProbe protocol and implementation."""

    def test_default_probe_creates_with_default_logger(self):
        """Default probe should work without explicit logger."""
        probe = DefaultRemoteStoreProbe()
        assert probe._logger is not None

    def test_default_probe_accepts_custom_logger(self, mock_logger):
        """Default probe should accept a custom logger."""
        probe = DefaultRemoteStoreProbe(logger=mock_logger)
        assert probe._logger is mock_logger

    def test_query_executed_logs_debug(self, mock_logger):
        """query_executed should log the table, operation and row count."""
        probe = DefaultRemoteStoreProbe(logger=mock_logger)

        probe.query_executed(
            table="people", operation="select", row_count=25, query={"table": "people"}
        )

        mock_logger.debug.assert_called_once_with(
            "store_query_executed",
            table="people",
            operation="select",
            row_count=25,
            query={"table": "people"},
        )

    def test_query_failed_logs_error(self, mock_logger):
        probe = DefaultRemoteStoreProbe(logger=mock_logger)

        probe.query_failed(
            table="people",
            operation="count",
            message="people: the data service timed out",
        )

        mock_logger.error.assert_called_once_with(
            "store_query_failed",
            table="people",
            operation="count",
            message="people: the data service timed out",
            status_code=None,
        )

    def test_rows_inserted_reports_skipped_duplicates(self, mock_logger):
        probe = DefaultRemoteStoreProbe(logger=mock_logger)

        probe.rows_inserted(table="people", requested=100, inserted=97)

        mock_logger.info.assert_called_once_with(
            "store_rows_inserted",
            table="people",
            requested=100,
            inserted=97,
            skipped=3,
        )

    def test_with_context_includes_context_in_logs(self, mock_logger):
        """Probe with context should include context metadata in logs."""
        context = ObservationContext(request_id="req-123", tenant_id="client-1")
        probe = DefaultRemoteStoreProbe(logger=mock_logger).with_context(context)

        probe.client_closed()

        mock_logger.debug.assert_called_once_with(
            "store_client_closed", request_id="req-123", tenant_id="client-1"
        )


class TestBulkLoaderProbe:
    """Tests for BulkLoaderProbe protocol and implementation."""

    def test_collection_loaded_logs_debug(self, mock_logger):
        probe = DefaultBulkLoaderProbe(logger=mock_logger)

        probe.collection_loaded(table="documents", key_count=25, row_count=61)

        mock_logger.debug.assert_called_once_with(
            "related_collection_loaded", table="documents", key_count=25, row_count=61
        )

    def test_duplicate_related_row_logs_warning(self, mock_logger):
        probe = DefaultBulkLoaderProbe(logger=mock_logger)

        probe.duplicate_related_row(
            table="people_enrollments", key="p1", kept_id="e1", dropped_id="e2"
        )

        mock_logger.warning.assert_called_once_with(
            "duplicate_related_row",
            table="people_enrollments",
            key="p1",
            kept_id="e1",
            dropped_id="e2",
        )

    def test_inconsistent_enrollment_logs_warning(self, mock_logger):
        probe = DefaultBulkLoaderProbe(logger=mock_logger)

        probe.inconsistent_enrollment(
            person_id="p1", completion_percentage=100, onboarding_completed=False
        )

        mock_logger.warning.assert_called_once_with(
            "inconsistent_enrollment",
            person_id="p1",
            completion_percentage=100,
            onboarding_completed=False,
        )

    def test_with_context_keeps_logger(self, mock_logger):
        probe = DefaultBulkLoaderProbe(logger=mock_logger)

        bound = probe.with_context(ObservationContext(generation=4))
        bound.association_completed(primary_count=25, collection_count=3, query_count=3)

        assert bound._logger is mock_logger
        mock_logger.debug.assert_called_once_with(
            "association_completed",
            primary_count=25,
            collection_count=3,
            query_count=3,
            generation=4,
        )


class TestPaginationProbe:
    """Tests for PaginationProbe protocol and implementation."""

    def test_page_loaded_logs_info(self, mock_logger):
        probe = DefaultPaginationProbe(logger=mock_logger)

        probe.page_loaded(page=2, row_count=25, total_count=1200, count_fetched=False)

        mock_logger.info.assert_called_once_with(
            "page_loaded",
            page=2,
            row_count=25,
            total_count=1200,
            count_fetched=False,
        )

    def test_page_load_failed_logs_error(self, mock_logger):
        probe = DefaultPaginationProbe(logger=mock_logger)

        probe.page_load_failed(
            page=0, message="people: could not reach the data service"
        )

        mock_logger.error.assert_called_once_with(
            "page_load_failed",
            page=0,
            message="people: could not reach the data service",
        )

    def test_navigation_ignored_logs_debug(self, mock_logger):
        probe = DefaultPaginationProbe(logger=mock_logger)

        probe.navigation_ignored(target_page=48, reason="out_of_range")

        mock_logger.debug.assert_called_once_with(
            "navigation_ignored", target_page=48, reason="out_of_range"
        )

    def test_stale_result_discarded_logs_info(self, mock_logger):
        probe = DefaultPaginationProbe(logger=mock_logger)

        probe.stale_result_discarded(page=1, generation=2, current_generation=3)

        mock_logger.info.assert_called_once_with(
            "stale_page_discarded", page=1, generation=2, current_generation=3
        )


class TestDashboardLoadProbe:
    """Tests for DashboardLoadProbe protocol and implementation."""

    def test_stage_started_logs_debug(self, mock_logger):
        probe = DefaultDashboardLoadProbe(logger=mock_logger)

        probe.stage_started(stage="Client", current=1, total=7)

        mock_logger.debug.assert_called_once_with(
            "dashboard_stage_started", stage="Client", current=1, total=7
        )

    def test_load_failed_logs_error(self, mock_logger):
        probe = DefaultDashboardLoadProbe(logger=mock_logger)

        probe.load_failed(tenant_id="client-1", stage="Invitations", message="boom")

        mock_logger.error.assert_called_once_with(
            "dashboard_load_failed",
            client_id="client-1",
            stage="Invitations",
            message="boom",
        )

    def test_with_context_returns_same_probe_type(self, mock_logger):
        context = ObservationContext(tenant_id="client-1")

        bound = DefaultDashboardLoadProbe(logger=mock_logger).with_context(context)
        bound.applications_defaulted(tenant_id="client-1")

        assert isinstance(bound, DefaultDashboardLoadProbe)
        mock_logger.info.assert_called_once_with(
            "applications_defaulted", client_id="client-1", tenant_id="client-1"
        )


class TestTenantResolverProbe:
    """Tests for TenantResolverProbe protocol and implementation."""

    def test_tenant_resolved_logs_info(self, mock_logger):
        probe = DefaultTenantResolverProbe(logger=mock_logger)

        probe.tenant_resolved(code="nets-demo", requested="acme", via="priority")

        mock_logger.info.assert_called_once_with(
            "tenant_resolved", client_code="nets-demo", requested="acme", via="priority"
        )

    def test_tenant_fallback_logs_warning(self, mock_logger):
        probe = DefaultTenantResolverProbe(logger=mock_logger)

        probe.tenant_fallback(requested="acme")

        mock_logger.warning.assert_called_once_with("tenant_fallback", requested="acme")


class TestPopulationProbe:
    """Tests for PopulationProbe protocol and implementation."""

    def test_default_probe_creates_with_default_logger(self):
        probe = DefaultPopulationProbe()
        assert probe._logger is not None

    def test_batch_failed_logs_row_range(self, mock_logger):
        probe = DefaultPopulationProbe(logger=mock_logger)

        probe.batch_failed(
            table="people", batch_index=6, row_range=(600, 700), reason="timed out"
        )

        mock_logger.error.assert_called_once_with(
            "demo_batch_failed",
            table="people",
            batch_index=6,
            row_start=600,
            row_end=700,
            reason="timed out",
        )

    def test_table_populated_logs_info(self, mock_logger):
        probe = DefaultPopulationProbe(logger=mock_logger)

        probe.table_populated(table="people", batch_count=12, inserted=1200)

        mock_logger.info.assert_called_once_with(
            "demo_table_populated", table="people", batch_count=12, inserted=1200
        )

    def test_demo_client_ready_logs_info(self, mock_logger):
        probe = DefaultPopulationProbe(logger=mock_logger)

        probe.demo_client_ready(
            client_code="hygge-hvidlog", client_id="c1", created=True
        )

        mock_logger.info.assert_called_once_with(
            "demo_client_ready",
            client_code="hygge-hvidlog",
            client_id="c1",
            created=True,
        )

    def test_with_context(self, mock_logger):
        context = ObservationContext(extra={"run": "populate"})
        probe = DefaultPopulationProbe(logger=mock_logger).with_context(context)

        probe.demo_data_removed(table="documents", row_count=12)

        mock_logger.info.assert_called_once_with(
            "demo_data_removed", table="documents", row_count=12, run="populate"
        )
