"""
Customer support chat orchestrator.

This package contains:
- settings / logging_config: configuration and shared logging setup
- storage: TTL key/value store over Redis
- sessions: session identity and bounded conversation history
- provider: OpenAI / Gemini completion clients and their fallback order
- chat: escalation policy, confidence scoring and the orchestrator
- api / realtime: HTTP and WebSocket surfaces
- routes: FastAPI app factory
"""
