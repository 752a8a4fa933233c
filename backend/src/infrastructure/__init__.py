"""Infrastructure adapters - storage, persistence, notifications, Redis"""
