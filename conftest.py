"""Shared pytest configuration for the AgentNFT SDK test suite."""

pytest_plugins = ["agentnft.testing.conftest"]
