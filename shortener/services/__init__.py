"""
Services module for business logic separation.

This module contains the codec, the identity source and the service classes
that encapsulate business logic, keeping it separate from API endpoints and
database models.
"""
