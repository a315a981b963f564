"""War alert detection and multi-tenant fan-out.

Submodules are imported explicitly (models, watermark, directory, adapters,
routing, channels, renderers, pipeline).
"""
