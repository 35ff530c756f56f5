"""
EIP-4844 신뢰 설정 (Trusted Setup / SRS)
=========================================

KZG 블롭 커밋먼트에 필요한 공개 파라미터를 로드하고 보관한다.

**SRS 구성 (라그랑주 형식)**:
  블롭이 평가 형식이므로 G1 부분도 라그랑주 기저로 보관한다.

  SRS = {
      g1_lagrange: [L₀(τ)·G1, L₁(τ)·G1, ..., L_{n-1}(τ)·G1]   (비트 반전 도메인 순서)
      g2_monomial: [G2, τ·G2, ...]
  }

  그러면 커밋먼트는 C = Σᵢ pᵢ·[Lᵢ(τ)]₁ = p(τ)·G1 이 된다.

**수명 주기**:
  - 프로세스 시작 시 버전이 고정된 파일에서 한 번 로드한다.
  - 로드 전에 파일 SHA-256을 기대값과 비교한다 (신뢰 앵커 무결성).
    기대값이 지정되지 않은 파일은 로드하지 않는다.
  - 크기가 FIELD_ELEMENTS_PER_BLOB와 다르면 InvalidSetup (시작 실패).
  - 이후에는 읽기 전용으로 공유하며 절대 변경하지 않는다.
    초기화 이후 동기화가 필요 없다.

**파일 형식**:
  consensus-specs의 trusted_setup_4096.json과 같은 JSON.
  "g1_lagrange", "g2_monomial" 키 아래 0x 접두사 hex 압축 점.

**개발용 생성기**:
  generate(size, seed)는 seed에서 τ를 결정론적으로 만든다. τ가 노출되므로
  테스트와 로컬 실행 전용이며, 실제 설정은 MPC 세리머니 결과를 로드해야 한다.

사용 예시:
    >>> setup = TrustedSetup.generate(size=16, seed=42)
    >>> setup.size  # 16
    >>> setup = TrustedSetup.load("trusted_setup_4096.json", expected_sha256="…")
"""

import hashlib
import json
import logging
import secrets
import threading

from zkp.blob.config import FIELD_ELEMENTS_PER_BLOB
from zkp.blob.errors import InvalidSetup, SerializationError
from zkp.blob.field import (
    FR, G1, G2, BLS_MODULUS,
    ec_mul,
    compress_g1, decompress_g1,
    compress_g2, decompress_g2,
    compute_roots_of_unity_brp,
)

logger = logging.getLogger(__name__)


def tau_from_seed(seed):
    """시드에서 toxic waste τ를 결정론적으로 도출한다 (테스트 전용)."""
    h = hashlib.sha256(str(seed).encode()).digest()
    return FR(int.from_bytes(h, "big") % BLS_MODULUS)


def _parse_hex(value):
    if not isinstance(value, str):
        raise ValueError(f"hex 문자열이 아닙니다: {value!r}")
    if value.startswith("0x"):
        value = value[2:]
    return bytes.fromhex(value)


class TrustedSetup:
    """불변 KZG 신뢰 설정.

    속성:
        g1_lagrange: 라그랑주 형식 G1 점 튜플 (비트 반전 도메인 순서)
        g2_monomial: [G2, τ·G2, ...] 튜플
        size: 도메인 크기 (블롭당 필드 원소 수)
        roots_of_unity_brp: 비트 반전 순서 단위근 튜플
        fingerprint: 로드한 파일의 SHA-256 hex (생성된 설정은 None)
    """

    def __init__(self, g1_lagrange, g2_monomial, fingerprint=None):
        g1_lagrange = tuple(g1_lagrange)
        g2_monomial = tuple(g2_monomial)

        n = len(g1_lagrange)
        if n < 1 or (n & (n - 1)) != 0:
            raise InvalidSetup(f"G1 점 개수는 2의 거듭제곱이어야 합니다: {n}")
        if len(g2_monomial) < 2:
            raise InvalidSetup(
                f"G2 점은 최소 2개([G2, τ·G2])가 필요합니다: {len(g2_monomial)}"
            )

        self._g1_lagrange = g1_lagrange
        self._g2_monomial = g2_monomial
        self._roots_of_unity_brp = tuple(compute_roots_of_unity_brp(n))
        self._fingerprint = fingerprint

    @property
    def g1_lagrange(self):
        return self._g1_lagrange

    @property
    def g2_monomial(self):
        return self._g2_monomial

    @property
    def size(self):
        return len(self._g1_lagrange)

    @property
    def roots_of_unity_brp(self):
        return self._roots_of_unity_brp

    @property
    def fingerprint(self):
        return self._fingerprint

    def __repr__(self):
        return f"TrustedSetup(size={self.size}, fingerprint={self._fingerprint!r})"

    # ── 생성 (테스트/개발 전용) ──

    @classmethod
    def generate(cls, size, seed=None):
        """안전하지 않은 결정론적 설정을 생성한다.

        Lᵢ(τ) = (τⁿ - 1)/n · ωᵢ / (τ - ωᵢ)  (ωᵢ: 비트 반전 도메인의 i번째 점)

        Args:
            size: 도메인 크기 (2의 거듭제곱)
            seed: τ 도출용 시드. None이면 무작위 τ (이 경우에도 τ는 메모리에 잠시 존재한다)

        Returns:
            TrustedSetup
        """
        if seed is not None:
            tau = tau_from_seed(seed)
        else:
            tau = FR(secrets.randbelow(BLS_MODULUS - 1) + 1)

        roots = compute_roots_of_unity_brp(size)
        zh_tau = tau ** size - FR(1)
        if zh_tau == FR(0):
            raise ValueError("τ가 평가 도메인 위에 있습니다. 다른 시드를 사용하세요")

        factor = zh_tau / FR(size)
        g1_lagrange = []
        for omega_i in roots:
            lagrange_at_tau = factor * omega_i / (tau - omega_i)
            g1_lagrange.append(ec_mul(G1, lagrange_at_tau))

        g2_monomial = [G2, ec_mul(G2, tau)]
        return cls(g1_lagrange, g2_monomial)

    # ── 직렬화 ──

    @classmethod
    def from_json(cls, data, expected_size=FIELD_ELEMENTS_PER_BLOB, fingerprint=None):
        """JSON 객체(dict)에서 설정을 복원한다.

        Raises:
            InvalidSetup: 키 누락, 잘못된 점 인코딩, 크기 불일치
        """
        if not isinstance(data, dict):
            raise InvalidSetup("신뢰 설정 JSON은 객체여야 합니다")
        try:
            g1_hex = data["g1_lagrange"]
            g2_hex = data["g2_monomial"]
        except KeyError as exc:
            raise InvalidSetup(f"신뢰 설정에 {exc.args[0]} 키가 없습니다") from exc

        if expected_size is not None and len(g1_hex) != expected_size:
            raise InvalidSetup(
                f"신뢰 설정 크기 {len(g1_hex)}가 기대값 {expected_size}와 다릅니다"
            )

        g1_lagrange = []
        for i, item in enumerate(g1_hex):
            try:
                g1_lagrange.append(decompress_g1(_parse_hex(item)))
            except (ValueError, SerializationError) as exc:
                raise InvalidSetup(
                    f"g1_lagrange[{i}] 점이 올바르지 않습니다: {exc}", element_index=i
                ) from exc

        g2_monomial = []
        for i, item in enumerate(g2_hex):
            try:
                g2_monomial.append(decompress_g2(_parse_hex(item)))
            except (ValueError, SerializationError) as exc:
                raise InvalidSetup(
                    f"g2_monomial[{i}] 점이 올바르지 않습니다: {exc}", element_index=i
                ) from exc

        return cls(g1_lagrange, g2_monomial, fingerprint=fingerprint)

    @classmethod
    def load(cls, path, expected_sha256=None, expected_size=FIELD_ELEMENTS_PER_BLOB):
        """버전 고정된 설정 파일을 로드한다.

        Args:
            path: JSON 파일 경로
            expected_sha256: 파일의 기대 SHA-256 hex (필수, 0x 접두사와 대소문자 무관)
            expected_size: 기대 도메인 크기 (기본값: 4096)

        Returns:
            TrustedSetup

        Raises:
            InvalidSetup: 기대 해시 누락, 파일 읽기 실패, 해시 불일치, 형식 오류, 크기 불일치
        """
        # 신뢰 앵커: 해시로 고정되지 않은 파일은 로드하지 않는다
        if not expected_sha256:
            raise InvalidSetup(
                f"신뢰 설정 파일의 기대 SHA-256이 지정되지 않았습니다: {path}"
            )
        expected = expected_sha256.lower()
        if expected.startswith("0x"):
            expected = expected[2:]

        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as exc:
            raise InvalidSetup(f"신뢰 설정 파일을 읽을 수 없습니다: {path}") from exc

        digest = hashlib.sha256(raw).hexdigest()
        if digest != expected:
            raise InvalidSetup(
                f"신뢰 설정 해시 불일치: 기대 {expected}, 실제 {digest}"
            )

        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise InvalidSetup(f"신뢰 설정 JSON 파싱 실패: {exc}") from exc

        setup = cls.from_json(data, expected_size=expected_size, fingerprint=digest)
        logger.info("trusted setup loaded: path=%s size=%d sha256=%s",
                    path, setup.size, digest)
        return setup

    def to_json(self):
        """설정을 JSON 객체(dict)로 변환한다."""
        return {
            "g1_lagrange": ["0x" + compress_g1(p).hex() for p in self._g1_lagrange],
            "g2_monomial": ["0x" + compress_g2(p).hex() for p in self._g2_monomial],
        }

    def dump(self, path):
        """설정을 JSON 파일로 저장하고 파일의 SHA-256 hex를 반환한다."""
        raw = json.dumps(self.to_json(), indent=2).encode()
        with open(path, "wb") as f:
            f.write(raw)
        return hashlib.sha256(raw).hexdigest()


# ─────────────────────────────────────────────────────────────────────
# 프로세스 전역 설정 (한 번 생성, 읽기 전용 공유)
# ─────────────────────────────────────────────────────────────────────

_TRUSTED_SETUP = None
_INIT_LOCK = threading.Lock()


def build_trusted_setup(config):
    """설정(PipelineConfig)에 따라 신뢰 설정을 만든다.

    파일 경로가 있으면 기대 SHA-256과 함께 로드하고 (해시 누락은 InvalidSetup),
    없으면 개발용 시드로 생성한다.
    둘 다 없으면 InvalidSetup.
    """
    if config.trusted_setup_path:
        return TrustedSetup.load(
            config.trusted_setup_path,
            expected_sha256=config.trusted_setup_sha256,
            expected_size=FIELD_ELEMENTS_PER_BLOB,
        )
    if config.dev_setup_seed is not None:
        logger.warning(
            "using INSECURE development trusted setup (seed=%s, size=%d)",
            config.dev_setup_seed, config.dev_setup_size,
        )
        return TrustedSetup.generate(config.dev_setup_size, seed=config.dev_setup_seed)
    raise InvalidSetup("신뢰 설정 파일 경로도 개발용 시드도 지정되지 않았습니다")


def init_trusted_setup(config=None, setup=None):
    """프로세스 전역 신뢰 설정을 한 번만 초기화한다.

    이미 초기화되어 있으면 기존 설정을 반환하고, 다른 config나 setup이
    주어졌다면 경고를 남긴다. 실패하면 예외가 그대로 전파되어
    프로세스 시작을 막는다.

    Args:
        config: PipelineConfig (setup이 없을 때 사용)
        setup: 이미 만들어진 TrustedSetup (테스트용 주입)

    Returns:
        TrustedSetup
    """
    global _TRUSTED_SETUP
    with _INIT_LOCK:
        if _TRUSTED_SETUP is None:
            if setup is None:
                setup = build_trusted_setup(config)
            _TRUSTED_SETUP = setup
            logger.info("process trusted setup initialized: %r", setup)
        elif (setup is not None and setup is not _TRUSTED_SETUP) or (setup is None and config is not None):
            logger.warning(
                "trusted setup already initialized (%r); ignoring new config=%r setup=%r",
                _TRUSTED_SETUP, config, setup,
            )
        return _TRUSTED_SETUP


def get_trusted_setup():
    """초기화된 전역 신뢰 설정을 반환한다.

    Raises:
        InvalidSetup: 아직 초기화되지 않았을 때
    """
    setup = _TRUSTED_SETUP
    if setup is None:
        raise InvalidSetup("신뢰 설정이 초기화되지 않았습니다")
    return setup


def reset_trusted_setup():
    """전역 설정을 버린다. 손상 감지 시 프로세스 상태 재구성, 테스트에서 사용."""
    global _TRUSTED_SETUP
    with _INIT_LOCK:
        _TRUSTED_SETUP = None
