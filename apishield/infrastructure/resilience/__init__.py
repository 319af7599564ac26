"""API Resilience Implementations.

Contains the response validator, the error classifier and the retrying
request executor with exponential backoff.
Bounded Context: API Resilience
"""
