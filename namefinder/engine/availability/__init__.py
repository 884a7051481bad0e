"""Domain availability resolution."""

from .cache import AvailabilityCache
from .providers import AvailabilityProvider, DnsOverHttpsProvider, RdapProvider
from .resolver import AvailabilityResolver

__all__ = [
    'AvailabilityCache',
    'AvailabilityProvider',
    'AvailabilityResolver',
    'DnsOverHttpsProvider',
    'RdapProvider',
]
