"""
Haven - Clinical Record and Communication Portal

This package provides the backend for the Haven portal, connecting
therapists, office administrators and clients.

IMPORTANT: This system stores Protected Health Information.
Every clinical read by someone other than the subject is audited.
"""

__version__ = "0.1.0"
__author__ = "Haven Engineering Team"
