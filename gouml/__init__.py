"""Generate PlantUML class diagrams from Go source trees."""

__version__ = "0.1.0"