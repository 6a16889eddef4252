"""Order and seller reference lookups used by reports."""

import os

_directory_instance = None


def get_directory():
    """Return the configured reference directory (singleton).

    Uses InMemoryDirectory by default; override with REFERENCE_DIRECTORY.
    """
    global _directory_instance
    if _directory_instance is None:
        backend = os.environ.get("REFERENCE_DIRECTORY", "memory")
        if backend == "memory":
            from shipping.directory.memory_adapter import InMemoryDirectory

            _directory_instance = InMemoryDirectory()
        else:
            raise ValueError(f"Unknown reference directory: {backend}")
    return _directory_instance


def reset_directory():
    global _directory_instance
    _directory_instance = None
