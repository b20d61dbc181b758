"""Sales call QA analysis service."""
