"""Analysis helpers for RRLabel manifests."""

from .label_export import labels_to_dataframe, label_counts

__all__ = ['labels_to_dataframe', 'label_counts']
