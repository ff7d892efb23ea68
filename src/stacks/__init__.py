"""
Module: stacks
Description: Package initialization for CloudFormation stack handling.

- template: Deterministic queue-pair template synthesis
- base: The three-operation StackClient capability
- client: CloudFormation-backed StackLifecycleClient
"""

__all__ = []
