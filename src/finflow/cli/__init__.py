"""CLI interface for finflow."""
