"""apishield: a resilient HTTP API client.

Issues requests, retries transient failures with exponential backoff,
detects disguised error pages, and maps every failure onto a small,
user-presentable error taxonomy.
"""

__version__ = "1.0.0"
