"""
Treatment catalog.

Responsibilities:
- Define the Service record the scorer consumes.
- Load and validate the categorised catalog from JSON.
- Keep the parsed catalog (and its scoring profiles) in memory for the process lifetime.
"""
