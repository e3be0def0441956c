"""Service layer: validator, cache, telemetry and the pipeline.

Services may import from domain and layers.
They must never import from config at module import time.
"""
