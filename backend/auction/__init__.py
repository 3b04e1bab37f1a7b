"""Application package for the online auction backend.

This package exposes the service, repository and model modules used by
the FastAPI application: users list items, place bids before the
auction closes and ask sellers questions about their listings.
"""
