"""Dependency injection module."""

from typing import Type

from tagnest.util.di.base import Component, ProviderBase
from tagnest.util.di.core import ProdConfigProvider
from tagnest.util.di.domain import ProdDomainProvider
from tagnest.util.di.infrastructure import (
    PersistenceProvider,
    ProdPersistenceProvider,
)

# Concrete providers first, then mockable components
PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    PersistenceProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Get the provider class to instantiate for a PROVIDERS entry.

    Concrete providers are returned as is. A mockable component returns
    its subclass whose __is_mock__ matches use_mock.

    Raises:
        ValueError: If the component has no such implementation
    """
    if base.__mock_component__ is None:
        return base

    impl = next(
        (c for c in base.__subclasses__() if c.__is_mock__ == use_mock),
        None,
    )
    if not impl:
        kind = "mock" if use_mock else "production"
        raise ValueError(f"No {kind} implementation for {base.__mock_component__}")

    return impl


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "PersistenceProvider",
    "ProdPersistenceProvider",
]
