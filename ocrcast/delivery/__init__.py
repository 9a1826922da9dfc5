"""Delivery of recognized text to subscribers."""

from ocrcast.delivery.broadcaster import MessageSink, WebSocketBroadcaster

__all__ = ["MessageSink", "WebSocketBroadcaster"]
