"""Webhook endpoint resources."""
