"""
Authentication API router - delegates to the auth controller.
"""

from faucetswap.api.controller.auth.auth_controller import router

__all__ = ['router']
