"""User interfaces built on top of the workspace."""
