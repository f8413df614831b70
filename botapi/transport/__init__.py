"""Transports that fetch raw response bodies from the bot API."""

from .base import Transport
from .http import HttpTransport

__all__ = ["Transport", "HttpTransport"]
