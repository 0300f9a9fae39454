"""
Signed Callbacks - signed server-notification URLs for store platforms.
"""
