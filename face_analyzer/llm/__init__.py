"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Detect facial features in an uploaded photo with a vision model.
- Turn the scorer's shortlist into explained final recommendations.
- Recover JSON from free-form model output and reject malformed responses.
"""
