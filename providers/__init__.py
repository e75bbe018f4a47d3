"""
providers — federated sign-in through external identity providers.

Provides:
  • OAuth2 consent-URL generation per provider (Google, Discord, GitHub)
  • Callback handling (code → token exchange → profile fetch)
  • Profile normalisation through a per-provider field-mapping table
  • Lazy creation of the local user on first sign-in

Each provider is a subclass of BaseProvider.
"""
