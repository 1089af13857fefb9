"""Entrega HTTP de webhooks assinados."""

from .sender import SendResult, WebhookSender

__all__ = ["SendResult", "WebhookSender"]
