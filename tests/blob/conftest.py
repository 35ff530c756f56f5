import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkp.blob.srs import TrustedSetup, tau_from_seed, reset_trusted_setup


# ── 테스트 상수 ──
SETUP_SIZE = 16
SETUP_SEED = 42

# 256바이트 고정 패턴 (31바이트씩 9개 원소를 채움)
PATTERN_PUBDATA = bytes((i * 7 + 1) % 256 for i in range(256))


@pytest.fixture(scope="session")
def setup_small():
    """Small insecure trusted setup (16 elements) shared by all tests."""
    return TrustedSetup.generate(size=SETUP_SIZE, seed=SETUP_SEED)


@pytest.fixture(scope="session")
def tau_small():
    """The toxic waste behind setup_small (test-only)."""
    return tau_from_seed(SETUP_SEED)


@pytest.fixture(scope="session")
def pattern_pubdata():
    return PATTERN_PUBDATA


@pytest.fixture
def clean_global_setup():
    """Make sure the process-wide setup is empty before and after a test."""
    reset_trusted_setup()
    yield
    reset_trusted_setup()
