"""Web API for the learning plan service."""
