"""Domain probes for the Demo application layer."""

from demo.application.observability.population_probe import (
    DefaultPopulationProbe,
    PopulationProbe,
)

__all__ = ["DefaultPopulationProbe", "PopulationProbe"]
