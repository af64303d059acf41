"""API subpackage - FastAPI surface over the discount engine."""
