"""
Triggers Package.

Entry point implementations for the provider Lambda.

Exports:
    CustomResourceHandler: Custom resource request dispatcher
"""

from .custom_resource import CustomResourceHandler

__all__ = [
    'CustomResourceHandler',
]
