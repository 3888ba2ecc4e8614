"""UniCensus facility census, inspections and maintenance tickets."""

__version__ = "1.8.0"
