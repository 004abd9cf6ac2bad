"""
Boundary layer for external system integrations.

Handles all interactions with external systems: SQL, DynamoDB and S3.
Provides adapters and clients for infrastructure dependencies.
"""
