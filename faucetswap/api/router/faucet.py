from faucetswap.api.controller.faucet.faucet_controller import router

__all__ = ['router']
