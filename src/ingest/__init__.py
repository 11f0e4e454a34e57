"""CSV ingestion pipeline.

This package parses delimited files on a producer thread and drains
the resulting rows into a document sink on the calling thread.
"""
