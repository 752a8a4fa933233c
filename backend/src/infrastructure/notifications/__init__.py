"""Notification gateways - direct SMTP and Celery-queued delivery"""
