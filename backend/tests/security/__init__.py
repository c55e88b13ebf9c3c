"""Security tests for the UAE Trails API

This module contains security-focused tests including:
- Authentication bypass attempts
- Role-based access control
- Tenant isolation
- Login rate limiting
"""
