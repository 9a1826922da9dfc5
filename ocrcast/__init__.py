"""
OCR relay service.

Applies pixel transforms to an image, recognizes its text with a local
Tesseract engine or remote Google Lens, and broadcasts the normalized text to
connected WebSocket subscribers.
"""

__version__ = "1.0.0"
