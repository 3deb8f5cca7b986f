"""Domain parsing for portal URLs."""
from .parsing import DomainDetails, get_domain, get_subdomain_and_path, validate_url

__all__ = ["DomainDetails", "get_domain", "get_subdomain_and_path", "validate_url"]
