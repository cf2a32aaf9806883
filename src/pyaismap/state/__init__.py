"""State/store layer.

This package is the single source of truth for the renderable feature set
and the user's search/selection state. Only the list sync engine and the
route fetch controller mutate the feature store.
"""
