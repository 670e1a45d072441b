"""Motorpool — cars CRUD service with stateless token authentication.

A small async backend: soft-deletable car records, username/password
registration and login issuing signed bearer tokens, and a protected
last-message-per-sender feed, all served over one database connection
per request.
"""

__version__ = "0.1.0"
