"""Core services: paths, configuration and the scan pipeline."""
