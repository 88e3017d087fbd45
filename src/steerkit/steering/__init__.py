"""Steering documents: catalogue, custom documents, templates and validation."""
