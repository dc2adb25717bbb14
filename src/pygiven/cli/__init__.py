"""Command line interface for pygiven."""
