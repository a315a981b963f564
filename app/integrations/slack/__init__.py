"""Slack Integration Package.

This package contains the Slack integration modules. Contains:

- client: Shared Slack Web API client used by the chat channel.
"""
