"""seasonflow: two-track (current / next season) branch lifecycle for git."""

__version__ = "1.0.0"
