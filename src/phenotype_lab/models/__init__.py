"""Model registry: unified access to the clustering strategies.

- discovery/   KMeans, GaussianMixture (scikit-learn) and row-partitioned NMF
"""
from .discovery import NMF, get_strategy, STRATEGIES


def get_model(name: str, **kwargs):
    """Get a clustering model by name.

    'nmf' returns a configured NMF engine; 'kmeans' / 'gmm' return the
    scikit-learn estimator.
    """
    name_lower = name.lower().replace('-', '_')
    if name_lower == 'nmf':
        return NMF(**kwargs)
    if name_lower == 'kmeans':
        from sklearn.cluster import KMeans
        return KMeans(**kwargs)
    if name_lower in ('gmm', 'gaussian_mixture'):
        from sklearn.mixture import GaussianMixture
        return GaussianMixture(**kwargs)
    raise ValueError(f"Unknown model: {name}. Available: {list_models()}")


def list_models() -> list:
    return sorted(STRATEGIES.keys())
