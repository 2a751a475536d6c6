"""Notifications - customer-facing transactional email."""
