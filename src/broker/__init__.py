"""
Module: broker
Description: Package initialization for the provisioning orchestrator.

- provider: SQSProvider, the service-lifecycle contract
- errors: Error taxonomy shared by all layers
"""

__all__ = []
