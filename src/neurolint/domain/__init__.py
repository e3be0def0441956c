"""Domain layer: result types and risk classification.

This layer depends only on stdlib and pydantic.
It must never import from services, layers, or config.
"""
