from .repository import GitRepositoryProvider, RepositoryProvider

__all__ = ["RepositoryProvider", "GitRepositoryProvider"]
