"""
블롭 파이프라인 상수 및 설정
=============================

EIP-4844 블롭 커밋먼트 파이프라인 전체에서 공유하는 고정 상수와
프로세스 설정(PipelineConfig)을 정의한다.

**v1 고정 상수**:
  - 블롭 하나 = 4096개의 필드 원소 × 32바이트 = 128KB
  - 원소당 실제 데이터는 31바이트 (최상위 바이트는 항상 0)
    → 어떤 바이트열을 넣어도 BLS12-381 스칼라 필드 위수를 넘지 않는다
  - 배치당 블롭 수 상한: 2

**설정(PipelineConfig)**:
  v1에서 운영 중 조정 가능한 값은 신뢰 설정 파일의 선택뿐이다.
  나머지(개발용 설정 시드, 워커 수, 로그 레벨)는 테스트와 로컬 실행용이다.

사용 예시:
    >>> from zkp.blob.config import PipelineConfig, FIELD_ELEMENTS_PER_BLOB
    >>> config = PipelineConfig.from_env()
    >>> FIELD_ELEMENTS_PER_BLOB  # 4096
"""

import os


# ─────────────────────────────────────────────────────────────────────
# 블롭 형식 상수
# ─────────────────────────────────────────────────────────────────────

FIELD_ELEMENTS_PER_BLOB = 4096
BYTES_PER_FIELD_ELEMENT = 32

# 원소당 데이터 바이트 수 (첫 바이트는 0으로 예약)
USABLE_BYTES_PER_FIELD_ELEMENT = 31

BYTES_PER_BLOB = FIELD_ELEMENTS_PER_BLOB * BYTES_PER_FIELD_ELEMENT
BLOB_CAPACITY_BYTES = FIELD_ELEMENTS_PER_BLOB * USABLE_BYTES_PER_FIELD_ELEMENT

MAX_BLOBS_PER_BLOCK = 2
MAX_BLOBS_PER_BATCH = MAX_BLOBS_PER_BLOCK

# ─────────────────────────────────────────────────────────────────────
# 커밋먼트 / 해시 상수
# ─────────────────────────────────────────────────────────────────────

VERSIONED_HASH_VERSION_KZG = 0x01
BYTES_PER_COMMITMENT = 48
BYTES_PER_PROOF = 48
BYTES_PER_HASH = 32

# BLS12-381 스칼라 필드 곱셈군의 생성자 (단위근 계산용)
PRIMITIVE_ROOT_OF_UNITY = 7

# ─────────────────────────────────────────────────────────────────────
# 환경 변수 이름
# ─────────────────────────────────────────────────────────────────────

ENV_TRUSTED_SETUP_PATH = "BLOB_TRUSTED_SETUP_PATH"
ENV_TRUSTED_SETUP_SHA256 = "BLOB_TRUSTED_SETUP_SHA256"
ENV_DEV_SETUP_SEED = "BLOB_DEV_SETUP_SEED"
ENV_DEV_SETUP_SIZE = "BLOB_DEV_SETUP_SIZE"
ENV_MAX_WORKERS = "BLOB_MAX_WORKERS"
ENV_LOG_LEVEL = "BLOB_LOG_LEVEL"


class PipelineConfig:
    """프로세스 단위 파이프라인 설정.

    속성:
        trusted_setup_path: 신뢰 설정 JSON 파일 경로 (운영용)
        trusted_setup_sha256: 설정 파일의 기대 SHA-256 (hex). 파일 경로를 쓸 때는 필수
        dev_setup_seed: 파일 대신 시드로 설정을 생성할 때의 시드 (개발/테스트 전용, 안전하지 않음)
        dev_setup_size: 개발용 설정의 도메인 크기
        max_workers: 블롭별 파이프라인을 병렬 실행할 스레드 수
        log_level: 로깅 레벨 이름
    """

    def __init__(self, trusted_setup_path=None, trusted_setup_sha256=None,
                 dev_setup_seed=None, dev_setup_size=FIELD_ELEMENTS_PER_BLOB,
                 max_workers=MAX_BLOBS_PER_BLOCK, log_level="INFO"):
        self.trusted_setup_path = trusted_setup_path
        self.trusted_setup_sha256 = trusted_setup_sha256
        self.dev_setup_seed = dev_setup_seed
        self.dev_setup_size = dev_setup_size
        self.max_workers = max_workers
        self.log_level = log_level

    @classmethod
    def from_env(cls, environ=None):
        """환경 변수에서 설정을 읽는다.

        Args:
            environ: 환경 변수 매핑 (기본값: os.environ)

        Returns:
            PipelineConfig
        """
        if environ is None:
            environ = os.environ

        dev_seed = environ.get(ENV_DEV_SETUP_SEED)
        return cls(
            trusted_setup_path=environ.get(ENV_TRUSTED_SETUP_PATH),
            trusted_setup_sha256=environ.get(ENV_TRUSTED_SETUP_SHA256),
            dev_setup_seed=int(dev_seed) if dev_seed is not None else None,
            dev_setup_size=int(environ.get(ENV_DEV_SETUP_SIZE, FIELD_ELEMENTS_PER_BLOB)),
            max_workers=int(environ.get(ENV_MAX_WORKERS, MAX_BLOBS_PER_BLOCK)),
            log_level=environ.get(ENV_LOG_LEVEL, "INFO"),
        )

    def __repr__(self):
        return (
            f"PipelineConfig(trusted_setup_path={self.trusted_setup_path!r}, "
            f"dev_setup_seed={self.dev_setup_seed!r}, "
            f"dev_setup_size={self.dev_setup_size}, max_workers={self.max_workers})"
        )
