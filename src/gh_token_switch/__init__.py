"""gh-token-switch: named GitHub CLI token profiles backed by the OS keychain."""

__version__ = "0.1.0"
