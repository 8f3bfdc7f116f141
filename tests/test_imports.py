"""
Test imports for sitescore package.
"""

import sitescore
from sitescore import AScore, AScoreConfig


def test_sitescore_import():
    """Test that the main sitescore package can be imported."""
    assert hasattr(sitescore, "__version__")
    assert sitescore.__version__ == "0.1.0"


def test_ascore_import():
    """Test that AScore can be imported."""
    assert AScore is not None
    assert AScoreConfig is not None


def test_cli_import():
    """Test that CLI can be imported."""
    from sitescore import sitescorec

    assert sitescorec is not None
    assert hasattr(sitescorec, "main")
