"""Application services for the Demo bounded context."""

from demo.application.services.population_service import (
    DemoPopulationService,
    PopulationSummary,
)
from demo.application.services.setup_service import (
    DemoSetupService,
    DemoStatus,
    ResetSummary,
    SetupSummary,
)

__all__ = [
    "DemoPopulationService",
    "DemoSetupService",
    "DemoStatus",
    "PopulationSummary",
    "ResetSummary",
    "SetupSummary",
]
