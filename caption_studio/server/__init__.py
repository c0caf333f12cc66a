"""HTTP API server: FastAPI app, job store, and request/response models."""
