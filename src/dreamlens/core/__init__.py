from .protocols import IDreamProvider, IProviderConfigStore

__all__ = ["IDreamProvider", "IProviderConfigStore"]
