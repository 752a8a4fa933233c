"""Background workers module for async task processing.

Notifications are queued by the API and delivered here so that a slow or
unavailable mail relay never blocks a workflow request.
"""
