"""Command line interface: ``python -m nanion_ingest.cli``."""
