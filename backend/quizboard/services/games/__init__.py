"""Game domain services: score entry and game lifecycle.

This package contains the domain logic imported by HTTP routes and socket
handlers, keeping transport concerns separated from the scoring rules.
"""
