"""
Apps package - deployable entrypoints.

This package contains:
- secret_rotation: Secrets Manager rotation function for the artifact store
  access key
"""
