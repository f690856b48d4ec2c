"""Persistence: JSONL set log and serializers."""
