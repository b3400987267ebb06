"""
Gemini CLI OpenAI gateway.

Python server exposing OpenAI-compatible endpoints for Google's Gemini models
via the Gemini CLI OAuth flow, with a local file-backed KV namespace for
self-hosted deployments.
"""
