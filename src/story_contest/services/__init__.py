"""Application services built on the ranking engine and storage layer."""
