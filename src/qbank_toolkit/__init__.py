"""Top-level package for the question bank toolkit.

Provides subpackages:
- qbank_toolkit.core – immutable models and text helpers
- qbank_toolkit.ingestion – column mapping, normalization and merging of source files
- qbank_toolkit.bank – canonical dataset handle, reference ids and queries
- qbank_toolkit.grading – matching configuration and answer checking
"""

def _get_version() -> str:
    """Get version from importlib.metadata (installed) or pyproject.toml (dev)."""
    try:
        from importlib.metadata import version as pkg_version
        return pkg_version("qbank-toolkit")
    except Exception:
        pass

    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            for line in pyproject.read_text().splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.1.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except Exception:
            pass
    return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
