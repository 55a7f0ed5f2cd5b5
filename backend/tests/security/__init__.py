"""Security tests for orgscope

This module contains security-focused tests including:
- Cross-tenant record access
- Organization hint tampering
- Forged and expired tokens
"""
