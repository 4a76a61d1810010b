"""
Clients for external HTTP collaborators.
"""
from clients.email_relay_client import EmailRelayClient

__all__ = ["EmailRelayClient"]
