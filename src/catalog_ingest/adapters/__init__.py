"""Adapters binding the domain ports to GitHub, HTTP and SQLAlchemy."""
