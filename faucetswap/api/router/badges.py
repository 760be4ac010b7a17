from faucetswap.api.controller.badges.badges_controller import router

__all__ = ['router']
