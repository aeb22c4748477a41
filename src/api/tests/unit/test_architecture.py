"""Architecture tests using pytest-archon.

These tests enforce DDD architectural boundaries between layers
within the People and Demo bounded contexts and the shared kernel.
"""

from pytest_archon import archrule


class TestPeopleDomainLayerBoundaries:
    """Tests that the domain layer has no forbidden dependencies."""

    def test_domain_does_not_import_infrastructure(self):
        """Domain layer should not depend on infrastructure.

        Person records and statuses are pure data and should not know
        about the hosted store or HTTP clients.
        """
        (
            archrule("domain_no_infrastructure")
            .match("people.domain*")
            .should_not_import("infrastructure*", "httpx*")
            .check("people")
        )

    def test_domain_does_not_import_application(self):
        """Domain layer should not depend on application layer.

        Domain objects should be usable without the loaders and controllers.
        """
        (
            archrule("domain_no_application")
            .match("people.domain*")
            .should_not_import("people.application*", "people.ports*")
            .check("people")
        )

    def test_domain_does_not_import_fastapi(self):
        """Domain layer should not depend on FastAPI.

        Domain objects should be framework-agnostic.
        """
        (
            archrule("domain_no_fastapi")
            .match("people.domain*")
            .should_not_import("fastapi*", "starlette*")
            .check("people")
        )


class TestPeopleApplicationLayerBoundaries:
    """Tests that the application layer has appropriate dependencies."""

    def test_application_does_not_import_infrastructure(self):
        """Application layer should not directly import infrastructure.

        Loaders and controllers depend on the IRemoteStore protocol from the
        shared kernel, not on the PostgREST implementation.
        """
        (
            archrule("application_no_infrastructure")
            .match("people.application*")
            .should_not_import("infrastructure*")
            .check("people")
        )

    def test_application_does_not_import_presentation(self):
        """Application layer should not know about HTTP routes or models."""
        (
            archrule("application_no_presentation")
            .match("people.application*")
            .should_not_import("people.presentation*", "fastapi*")
            .check("people")
        )

    def test_application_can_import_domain_and_ports(self):
        """Application layer should be able to import domain and ports.

        These are allowed dependencies in our DDD architecture.
        """
        (
            archrule("application_may_import_domain_ports")
            .match("people.application*")
            .may_import("people.domain*", "people.ports*")
            .check("people")
        )


class TestBoundedContextBoundaries:
    """Tests that bounded contexts only depend on each other one way."""

    def test_people_does_not_import_demo(self):
        """The dashboard never depends on demo data generation."""
        (
            archrule("people_no_demo")
            .match("people*")
            .should_not_import("demo*")
            .check("people")
        )

    def test_demo_application_does_not_import_infrastructure(self):
        """Demo services work against the IRemoteStore protocol.

        Only the command line wires in the PostgREST store and settings.
        """
        (
            archrule("demo_application_no_infrastructure")
            .match("demo.application*")
            .should_not_import("infrastructure*")
            .check("demo")
        )

    def test_demo_does_not_import_people_presentation(self):
        """Demo code reuses People queries and domain types, not its routes."""
        (
            archrule("demo_no_people_presentation")
            .match("demo*")
            .should_not_import("people.presentation*", "people.dependencies*")
            .check("demo")
        )


class TestSharedKernelBoundaries:
    """Tests that the shared kernel stays independent."""

    def test_shared_kernel_does_not_import_bounded_contexts(self):
        """The shared kernel is imported by contexts, never the reverse."""
        (
            archrule("shared_kernel_no_contexts")
            .match("shared_kernel*")
            .should_not_import("people*", "demo*", "infrastructure*")
            .check("shared_kernel")
        )


class TestDependencyLayerBoundaries:
    """Tests that dependency modules respect DDD boundaries."""

    def test_infrastructure_dependencies_does_not_import_contexts(self):
        """Infrastructure dependencies should not import bounded contexts."""
        (
            archrule("infrastructure_deps_no_contexts")
            .match("infrastructure.dependencies*")
            .should_not_import("people*", "demo*")
            .check("infrastructure")
        )
