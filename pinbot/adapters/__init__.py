"""Adapters — platform implementations of the ports."""
