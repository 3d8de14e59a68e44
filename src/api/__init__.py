"""
HTTP API for ReadOrNot.

Server-mediated deployment: book verification and review analysis run on
the server with credentials taken from environment configuration.
"""
