"""Azure control-plane bindings.

Modules:
    api: Resource Control API contract
    arm: Azure Resource Manager implementation
    blob: Blob storage helper
    client: Credential and management client factory
"""
