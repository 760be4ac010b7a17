from faucetswap.api.controller.chains.chains_controller import router

__all__ = ['router']
