"""Scenario execution engine."""
