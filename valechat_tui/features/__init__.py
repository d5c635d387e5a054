"""Framework-free feature helpers."""
