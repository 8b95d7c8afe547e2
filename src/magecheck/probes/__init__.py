"""Concrete collaborators injected into the check context."""
