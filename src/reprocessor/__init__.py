"""Reprocessing batches: stage existing entities and queue them for the ingest pipeline."""

__version__ = "0.1.0"
