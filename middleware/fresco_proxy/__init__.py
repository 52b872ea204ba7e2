"""
Fresco API Proxy
================

Web server middleware forwarding client requests to the Fresco API with
automatic client-credential or bearer authentication, file upload
forwarding, and a single bearer refresh on expired tokens.
"""

__version__ = "1.0.0"
