from faucetswap.api.controller.users.users_controller import router

__all__ = ['router']
