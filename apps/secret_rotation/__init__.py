"""Secrets Manager rotation function for the artifact store access key."""
