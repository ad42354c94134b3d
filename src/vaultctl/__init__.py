"""vaultctl - work with HashiCorp Vault secrets like files."""

__version__ = "0.1.0"
