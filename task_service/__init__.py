"""Task Service - CRUD microservice for tasks."""

__version__ = "1.0.0"
