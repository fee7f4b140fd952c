"""Deposit back office: permission-gated admin API."""
