"""
Haven Infrastructure Layer

Persistence, metrics and error tracking. Nothing here makes
access decisions; the service layer does that before calling in.
"""
