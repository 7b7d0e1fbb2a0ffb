"""Driving directions from several routing providers, normalized and framed in one viewport."""

__version__ = "0.1.0"
