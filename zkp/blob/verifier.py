"""
L1 검증 어댑터 (오프체인 참조 구현)
====================================

L1 컨트랙트가 수행하는 검사를 오프체인에서 그대로 재현한다.
실제 point evaluation 프리컴파일과 컨트랙트 로직은 외부에 있으며,
이 모듈은 파이프라인 산출물이 그 검사를 통과하는 형식인지 확인하는 용도이다.

**검증 과정 (블롭 하나)**:
  1. versioned hash는 prover가 아니라 실행 계층의 blob-hash 조회로 얻는다.
  2. point evaluation 입력 (192바이트):
        VH ‖ be32(x) ‖ be32(y) ‖ C (48) ‖ π (48)
     - C가 VH로 해시되는지 확인
     - 페어링으로 p(x) = y 확인
  3. keccak256(VH ‖ x ‖ y)를 재계산하여 증명 시스템이 인증한
     공개 입력 digest와 비교한다.

verifier는 x를 재계산하지 않는다 (raw를 모르기 때문).
raw, x, y 중 무엇이든 증명 생성 이후 바뀌면 3단계 digest 비교가 실패한다.

사용 예시:
    >>> data = point_evaluation_input(vh, x, y, commitment, proof)
    >>> point_evaluation(data, setup)  # True
    >>> verify_blob(artifacts, vh_from_execution_layer, setup)  # True
"""

import logging

from zkp.blob.config import BYTES_PER_HASH, BYTES_PER_COMMITMENT, BYTES_PER_PROOF
from zkp.blob.errors import BlobCountMismatch, FieldOverflow, SerializationError
from zkp.blob.field import fr_from_bytes, fr_to_bytes
from zkp.blob.kzg import versioned_hash, verify_kzg_proof
from zkp.blob.assembler import assemble

logger = logging.getLogger(__name__)


POINT_EVALUATION_INPUT_LENGTH = 3 * BYTES_PER_HASH + BYTES_PER_COMMITMENT + BYTES_PER_PROOF


def point_evaluation_input(vh, x, y, commitment, proof):
    """point evaluation 프리컴파일 입력(192바이트)을 만든다."""
    data = bytes(vh) + fr_to_bytes(x) + fr_to_bytes(y) + bytes(commitment) + bytes(proof)
    if len(data) != POINT_EVALUATION_INPUT_LENGTH:
        raise SerializationError(
            f"point evaluation 입력은 {POINT_EVALUATION_INPUT_LENGTH}바이트여야 합니다: {len(data)}"
        )
    return data


def point_evaluation(data, setup):
    """192바이트 입력에 대해 point evaluation 검사를 수행한다.

    Args:
        data: point_evaluation_input 형식의 바이트열
        setup: TrustedSetup

    Returns:
        bool: 검사 통과 여부

    Raises:
        SerializationError: 입력 길이가 192바이트가 아닐 때
    """
    if len(data) != POINT_EVALUATION_INPUT_LENGTH:
        raise SerializationError(
            f"point evaluation 입력은 {POINT_EVALUATION_INPUT_LENGTH}바이트여야 합니다: {len(data)}"
        )

    vh = data[0:32]
    commitment = data[96:144]
    proof = data[144:192]

    if versioned_hash(commitment) != vh:
        logger.debug("point evaluation rejected: commitment does not match versioned hash")
        return False

    try:
        x = fr_from_bytes(data[32:64])
        y = fr_from_bytes(data[64:96])
    except FieldOverflow:
        logger.debug("point evaluation rejected: x or y is not a canonical field element")
        return False

    try:
        return verify_kzg_proof(commitment, x, y, proof, setup)
    except SerializationError:
        logger.debug("point evaluation rejected: malformed commitment or proof")
        return False


def verify_blob(artifacts, vh, setup):
    """블롭 하나의 산출물을 L1 방식으로 검증한다.

    Args:
        artifacts: BlobArtifacts
        vh: 실행 계층에서 독립적으로 얻은 versioned hash
        setup: TrustedSetup

    Returns:
        bool
    """
    data = point_evaluation_input(
        vh, artifacts.x, artifacts.y, artifacts.commitment, artifacts.proof
    )
    if not point_evaluation(data, setup):
        return False
    return assemble(vh, artifacts.x, artifacts.y) == artifacts.public_input_digest


def verify_batch(artifacts_list, versioned_hashes, aux_output, setup):
    """배치 전체를 검증한다: 블롭별 검사 + 보조 출력의 위치별 일치.

    Args:
        artifacts_list: BlobArtifacts 리스트 (첨부 순서)
        versioned_hashes: 실행 계층에서 얻은 versioned hash 리스트 (blob index 순)
        aux_output: BatchAuxiliaryOutput
        setup: TrustedSetup

    Returns:
        bool

    Raises:
        BlobCountMismatch: versioned hash 수와 산출물 수가 다를 때
    """
    artifacts_list = list(artifacts_list)
    if len(artifacts_list) != len(versioned_hashes):
        raise BlobCountMismatch(
            f"versioned hash {len(versioned_hashes)}개와 블롭 산출물 {len(artifacts_list)}개가 다릅니다"
        )
    if aux_output.blob_count != len(artifacts_list):
        return False

    for position, (artifacts, vh) in enumerate(zip(artifacts_list, versioned_hashes)):
        if not verify_blob(artifacts, vh, setup):
            logger.info("batch verification failed at blob %d", position)
            return False
        if aux_output.public_input_digests[position] != artifacts.public_input_digest:
            return False
        if aux_output.linear_hashes[position] != artifacts.linear_hash:
            return False
    return True
