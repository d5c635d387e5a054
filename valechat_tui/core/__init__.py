"""Framework-agnostic core: records, collaborator interfaces, shell state."""
