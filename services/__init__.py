"""
Services module for Galeri Backend.

Contains the authentication, moderation and messaging logic.
"""
