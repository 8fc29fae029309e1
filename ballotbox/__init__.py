"""Permissioned election state machine with vote notifications."""
