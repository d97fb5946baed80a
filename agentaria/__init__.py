"""Agentaria: onboarding service for the messaging-automation product."""

__version__ = "0.1.0"
