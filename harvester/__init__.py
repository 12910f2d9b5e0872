"""
Collect tracking URLs from unread Gmail notifications
"""
