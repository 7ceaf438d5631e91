"""HTTP server package: FastAPI app and response models.

WHY: The assessment and token endpoints are the service's public
surface. Keeping them apart from the core lets the CLI reuse the
pipeline without importing FastAPI.

RULES:
- Route handlers only translate between HTTP and the core pipeline
"""
