"""Payments module - Yoco integration for online ordering."""
