"""HTTP API for Clinical Validator (FastAPI)."""
