"""Outreach cadence generation and scheduling for sales leads."""

__version__ = "0.1.0"
