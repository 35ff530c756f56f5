"""
공개 입력 조립기
=================

블롭별 (VH, x, y)를 증명 시스템이 받는 단일 공개 입력 digest로 묶고,
배치의 보조 출력(auxiliary output)을 구성한다.

**PublicInputDigest**:
  digest = keccak256(VH ‖ be32(x) ‖ be32(y))     (32 + 32 + 32 = 96바이트 입력)
  증명 시스템은 이름 붙은 입력 벡터가 아니라 집계된 해시 하나만 받는다.
  증명 회로와 L1 verifier가 모두 이 값을 재현하고 합의해야 한다.

**BatchAuxiliaryOutput**:
  길이 MAX_BLOBS_PER_BLOCK의 두 배열
    linear_hashes[i]        = keccak256(raw_i)
    public_input_digests[i] = digest_i
  i는 블롭이 운반 트랜잭션에 첨부된 순서이다. 사용하지 않는 칸은 0으로 채운다.
  하위 배치 커밋먼트 로직은 이 구조의 바이트 표현을 해시한다.

  블롭 수가 첨부된 블롭 수와 다르면 잘라내지 않고 BlobCountMismatch로
  실패한다 (블롭 누락은 위치 바인딩을 깨뜨린다).
"""

from eth_utils import keccak

from zkp.blob.config import MAX_BLOBS_PER_BLOCK, BYTES_PER_HASH
from zkp.blob.errors import BlobCountMismatch, SerializationError
from zkp.blob.field import fr_to_bytes


ZERO_HASH = b"\x00" * BYTES_PER_HASH


def assemble(vh, x, y):
    """공개 입력 digest = keccak256(VH ‖ x ‖ y).

    Args:
        vh: 32바이트 versioned hash
        x: 평가 점 (FR)
        y: 평가값 (FR)

    Returns:
        bytes: 32바이트 digest

    Raises:
        SerializationError: vh가 32바이트가 아닐 때
    """
    if len(vh) != BYTES_PER_HASH:
        raise SerializationError(
            f"versioned hash는 {BYTES_PER_HASH}바이트여야 합니다: {len(vh)}"
        )
    return keccak(bytes(vh) + fr_to_bytes(x) + fr_to_bytes(y))


class BlobArtifacts:
    """블롭 하나의 파이프라인 산출물.

    속성:
        blob_index: 배치 내 첨부 위치
        linear_hash: keccak256(raw) (32바이트)
        commitment: 48바이트 KZG 커밋먼트
        versioned_hash: 32바이트
        x: 평가 점 (FR)
        y: 평가값 (FR)
        proof: 48바이트 열기 증명
        public_input_digest: keccak256(VH ‖ x ‖ y)
    """

    def __init__(self, blob_index, linear_hash, commitment, versioned_hash,
                 x, y, proof, public_input_digest):
        self.blob_index = blob_index
        self.linear_hash = linear_hash
        self.commitment = commitment
        self.versioned_hash = versioned_hash
        self.x = x
        self.y = y
        self.proof = proof
        self.public_input_digest = public_input_digest

    def __eq__(self, other):
        if not isinstance(other, BlobArtifacts):
            return False
        return (
            self.blob_index == other.blob_index
            and self.linear_hash == other.linear_hash
            and self.commitment == other.commitment
            and self.versioned_hash == other.versioned_hash
            and self.x == other.x
            and self.y == other.y
            and self.proof == other.proof
            and self.public_input_digest == other.public_input_digest
        )

    def __repr__(self):
        return (
            f"BlobArtifacts(blob_index={self.blob_index}, "
            f"versioned_hash=0x{self.versioned_hash.hex()}, "
            f"digest=0x{self.public_input_digest.hex()})"
        )


class BatchAuxiliaryOutput:
    """배치 보조 출력: 위치가 맞춰진 두 고정 길이 배열.

    속성:
        linear_hashes: 길이 max_blobs 튜플
        public_input_digests: 길이 max_blobs 튜플
        blob_count: 실제 첨부된 블롭 수
    """

    def __init__(self, linear_hashes, public_input_digests, blob_count):
        self.linear_hashes = tuple(linear_hashes)
        self.public_input_digests = tuple(public_input_digests)
        self.blob_count = blob_count

    def to_bytes(self):
        """linear_hashes 전체 ‖ public_input_digests 전체."""
        return b"".join(self.linear_hashes) + b"".join(self.public_input_digests)

    def hash(self):
        return keccak(self.to_bytes())

    def __eq__(self, other):
        if not isinstance(other, BatchAuxiliaryOutput):
            return False
        return (
            self.linear_hashes == other.linear_hashes
            and self.public_input_digests == other.public_input_digests
            and self.blob_count == other.blob_count
        )

    def __repr__(self):
        return (
            f"BatchAuxiliaryOutput(blob_count={self.blob_count}, "
            f"hash=0x{self.hash().hex()})"
        )


def assemble_batch(items, attached_blob_count, max_blobs=MAX_BLOBS_PER_BLOCK):
    """블롭별 산출물을 배치 보조 출력으로 묶는다.

    items의 순서가 곧 첨부 순서이다. 재정렬이나 잘라내기를 하지 않는다.

    Args:
        items: BlobArtifacts 리스트 (첨부 순서)
        attached_blob_count: 운반 트랜잭션에 실제로 첨부된 블롭 수
        max_blobs: 배열 길이 (MAX_BLOBS_PER_BLOCK)

    Returns:
        BatchAuxiliaryOutput

    Raises:
        BlobCountMismatch: 산출물 수 ≠ 첨부 블롭 수, 0개, max_blobs 초과,
            또는 blob_index가 리스트 위치와 다를 때
    """
    items = list(items)
    if len(items) != attached_blob_count:
        raise BlobCountMismatch(
            f"블롭 산출물 {len(items)}개가 첨부된 블롭 {attached_blob_count}개와 다릅니다"
        )
    if not items:
        raise BlobCountMismatch("배치에는 최소 한 개의 블롭이 필요합니다")
    if len(items) > max_blobs:
        raise BlobCountMismatch(
            f"블롭 {len(items)}개가 블록당 최대 {max_blobs}개를 초과합니다"
        )

    for position, item in enumerate(items):
        if item.blob_index != position:
            raise BlobCountMismatch(
                f"위치 {position}의 산출물이 blob_index={item.blob_index}를 가집니다",
                blob_index=item.blob_index,
            )

    linear_hashes = [ZERO_HASH] * max_blobs
    digests = [ZERO_HASH] * max_blobs
    for position, item in enumerate(items):
        linear_hashes[position] = item.linear_hash
        digests[position] = item.public_input_digest

    return BatchAuxiliaryOutput(linear_hashes, digests, len(items))
