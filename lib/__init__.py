"""
Shared helpers for the DoseCare service
"""
