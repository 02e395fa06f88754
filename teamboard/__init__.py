"""Teamboard: team, membership and task collaboration API."""

__version__ = "1.0.0"
