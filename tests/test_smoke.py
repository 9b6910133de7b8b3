"""Smoke tests for the course-catalog-reconciler package.

Verifies the package can be imported and key symbols are accessible.
"""

from __future__ import annotations


def test_package_import() -> None:
    """Verify the package imports without errors."""
    import catalog_reconciler

    assert hasattr(catalog_reconciler, "__version__")


def test_version_is_string() -> None:
    """Verify the version is a valid string."""
    from catalog_reconciler import __version__

    assert isinstance(__version__, str)
    assert len(__version__) > 0


def test_core_exports_available() -> None:
    """Verify key public symbols are importable."""
    from catalog_reconciler import (
        DEFAULT_RULES,
        STEPS,
        CourseCatalog,
        PipelineConfig,
        run_pipeline,
    )

    assert CourseCatalog is not None
    assert PipelineConfig is not None
    assert run_pipeline is not None
    assert STEPS[0] == "all"
    assert len(DEFAULT_RULES) == 9


def test_all_names_resolve() -> None:
    """Verify every name in __all__ exists on the package."""
    import catalog_reconciler

    missing = [name for name in catalog_reconciler.__all__ if not hasattr(catalog_reconciler, name)]
    assert missing == [], f"Missing exports: {missing}"


def test_cli_entry_point_importable() -> None:
    """Verify the console script target exists."""
    from catalog_reconciler.cli import main

    assert callable(main)
