"""
Record storage for the projects service.

This package is responsible for:
* Keeping the process-wide in-memory cache of project records.
* Persisting records to MongoDB or to a single JSON file.
* Degrading to cache-only operation when the durable backend is unavailable.
"""
