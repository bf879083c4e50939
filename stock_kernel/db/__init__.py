"""Database layer for the stock kernel."""
