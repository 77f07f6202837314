"""Inference service clients."""

from .gemini import GeminiGateway

__all__ = ["GeminiGateway"]
