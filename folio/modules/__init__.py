"""
Folio Modules
=============

One Flask blueprint module per API resource.
"""

__all__ = ['auth', 'images', 'projects', 'galleries', 'contact', 'analytics', 'resume', 'email']
