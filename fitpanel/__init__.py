"""FitPanel Analytics — fitness-tracker panel cleaning, aggregation and reporting."""

__version__ = "1.0.0"
