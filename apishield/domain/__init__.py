"""Domain Layer: value objects, contracts and events for API resilience.

Nothing in here performs I/O; infrastructure implements the interfaces.
"""
