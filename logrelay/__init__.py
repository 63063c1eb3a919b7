"""JSON log relay: fan one inbound JSON write out to templated HTTP destinations."""

__version__ = "0.1.0"
