"""Provider collaborators backing the tool catalog."""

from toolwire.providers.aws import AwsProvider, ProviderError

__all__ = ["AwsProvider", "ProviderError"]
