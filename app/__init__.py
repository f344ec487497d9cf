"""
Movie Recommender Application Package.

This package contains the HTTP API, the login/rating/recommendation
services, the SQLite and Neo4j store backends, and shared utilities.
"""

__version__ = "1.0.0"
