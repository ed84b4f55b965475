"""
Recommendation engine.

Responsibilities:
- Extract comparable keywords from free-text phrases.
- Score every catalog service against the detected features using weighted
  substring and keyword-overlap heuristics.
- Return the top-scoring services in a deterministic order.
- Wrap the scorer with the detection / explanation steps and their fallbacks.
"""
