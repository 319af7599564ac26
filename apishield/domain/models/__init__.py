"""Domain models (Value Objects) for requests, outcomes, verdicts and errors."""
