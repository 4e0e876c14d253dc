"""Telephony components.

Call audio never passes through this service: Plivo is told, through an
answer document, to stream straight to the realtime backend.
"""
