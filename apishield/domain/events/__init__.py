"""Domain Event definitions.

Represents significant occurrences during an API call (attempts, retries,
resolution) that other parts of the system might react to.
"""
