"""Document storage layer.

This package connects to MongoDB and writes one document per call.
It also hosts the SDK client used by the CLI.
"""
