"""Render pipeline: debounce, compilation, and presentation of artifacts."""
