"""Mockupdesk: post mockups and client approvals for social media agencies."""

__version__ = "1.0.0"
