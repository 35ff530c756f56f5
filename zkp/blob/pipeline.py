"""
블롭 파이프라인 오케스트레이터
===============================

블롭별 파이프라인과 배치 조립의 전체 흐름을 관리한다.

  ┌─────────────────────────────────────────────────────┐
  │  1. 인코딩:   raw → Blob (width개의 FR 원소)         │
  ├─────────────────────────────────────────────────────┤
  │  2. 커밋:     Blob → C (48바이트) → VH (32바이트)    │
  ├─────────────────────────────────────────────────────┤
  │  3. 챌린지:   x = reduce(keccak(keccak(raw) ‖ VH))  │
  ├─────────────────────────────────────────────────────┤
  │  4. 평가:     y = p(x), π (열기 증명)                │
  ├─────────────────────────────────────────────────────┤
  │  5. 조립:     digest = keccak(VH ‖ x ‖ y)            │
  └─────────────────────────────────────────────────────┘

블롭끼리는 서로 독립적이므로 배치 안의 블롭 파이프라인을 스레드 풀에서
병렬로 실행한다. 최종 조립만 첨부 순서를 보존한다.
어느 블롭이든 실패하면 배치 전체가 실패한다 (부분 보조 출력 없음).

사용 예시:
    >>> from zkp.blob.pipeline import prove_batch
    >>> batch = prove_batch(pubdata, setup)
    >>> batch.aux_output.hash()
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from zkp.blob.config import MAX_BLOBS_PER_BLOCK
from zkp.blob.errors import BlobPipelineError
from zkp.blob.encoder import encode, split_pubdata
from zkp.blob.kzg import commit, versioned_hash
from zkp.blob.challenge import linear_hash, derive_challenge, evaluate
from zkp.blob.assembler import BlobArtifacts, assemble, assemble_batch

logger = logging.getLogger(__name__)


class BatchProof:
    """배치 하나의 파이프라인 결과.

    속성:
        artifacts: BlobArtifacts 튜플 (첨부 순서)
        aux_output: BatchAuxiliaryOutput
    """

    def __init__(self, artifacts, aux_output):
        self.artifacts = tuple(artifacts)
        self.aux_output = aux_output

    def commitments(self):
        return [a.commitment for a in self.artifacts]

    def proofs(self):
        return [a.proof for a in self.artifacts]

    def versioned_hashes(self):
        return [a.versioned_hash for a in self.artifacts]

    def __len__(self):
        return len(self.artifacts)

    def __repr__(self):
        return f"BatchProof(blobs={len(self.artifacts)}, aux={self.aux_output!r})"


def prove_blob(raw, setup, blob_index=0):
    """블롭 하나에 대한 전체 파이프라인을 실행한다.

    Args:
        raw: 이 블롭의 pubdata
        setup: TrustedSetup (읽기 전용 공유)
        blob_index: 배치 내 첨부 위치

    Returns:
        BlobArtifacts

    Raises:
        BlobPipelineError: 모든 파이프라인 오류 (blob_index가 채워진 상태)
    """
    raw = bytes(raw)
    try:
        blob = encode(raw, width=setup.size, blob_index=blob_index)
        commitment = commit(blob, setup)
        vh = versioned_hash(commitment)
        x = derive_challenge(raw, vh)
        y, proof = evaluate(blob, x, setup)
        digest = assemble(vh, x, y)
    except BlobPipelineError as exc:
        raise exc.with_blob_index(blob_index)

    logger.debug(
        "blob %d proved: commitment=0x%s digest=0x%s",
        blob_index, commitment.hex(), digest.hex(),
    )
    return BlobArtifacts(
        blob_index=blob_index,
        linear_hash=linear_hash(raw),
        commitment=commitment,
        versioned_hash=vh,
        x=x,
        y=y,
        proof=proof,
        public_input_digest=digest,
    )


def prove_batch(pubdata, setup, attached_blob_count=None,
                max_blobs=MAX_BLOBS_PER_BLOCK, max_workers=None):
    """배치 pubdata 전체를 블롭으로 나누어 증명 산출물과 보조 출력을 만든다.

    Args:
        pubdata: 배치 전체 pubdata
        setup: TrustedSetup
        attached_blob_count: 운반 트랜잭션에 첨부될 블롭 수 (None이면 나눈 조각 수)
        max_blobs: 배치당 최대 블롭 수
        max_workers: 스레드 수 (None이면 블롭 수)

    Returns:
        BatchProof

    Raises:
        DataTooLarge: pubdata가 배치 용량 초과
        BlobCountMismatch: 산출물 수와 첨부 블롭 수 불일치
        BlobPipelineError: 어느 블롭에서든 발생한 오류 (배치 전체 중단)
    """
    pieces = split_pubdata(pubdata, width=setup.size, max_blobs=max_blobs)
    if attached_blob_count is None:
        attached_blob_count = len(pieces)

    workers = max_workers or len(pieces)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(prove_blob, piece, setup, index)
            for index, piece in enumerate(pieces)
        ]
        # 제출 순서대로 결과를 모아 첨부 순서를 보존한다
        artifacts = [future.result() for future in futures]

    aux_output = assemble_batch(artifacts, attached_blob_count, max_blobs=max_blobs)
    logger.info(
        "batch proved: blobs=%d pubdata_bytes=%d aux_hash=0x%s",
        len(artifacts), len(pubdata), aux_output.hash().hex(),
    )
    return BatchProof(artifacts, aux_output)
