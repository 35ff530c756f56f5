"""
필드 인코더: pubdata 바이트 → 블롭 필드 원소
=============================================

L2 pubdata(임의 길이 바이트열)를 고정 개수의 BLS12-381 스칼라 필드 원소로
변환한다. 결과 블롭은 비트 반전 도메인 위의 평가 형식 다항식이다.

**인코딩 규칙 (바이트 단위로 고정, 구현 간 비트 동일)**:
  1. raw를 31바이트 조각으로 자른다 (마지막 조각은 0으로 오른쪽 패딩).
  2. 각 조각 앞에 0x00 한 바이트를 붙여 32바이트 청크를 만든다.
     → 청크 값 < 2^248 < r 이므로 생산자 쪽에서 오버플로가 불가능하다.
  3. 데이터가 끝난 뒤의 원소는 모두 0으로 채워 width개를 만든다.
  4. 각 32바이트 청크를 빅엔디안 정수로 해석하고 r 미만인지 검증한다.

**외부 블롭 바이트 검증**:
  이미 32바이트 청크로 주어진 블롭(Blob.from_bytes)은 4단계만 수행한다.
  r 이상인 청크는 모듈러 축소하지 않고 FieldOverflow로 거부한다.

용량:
  블롭당 width × 31바이트 (v1: 4096 × 31 = 126,976바이트)

사용 예시:
    >>> from zkp.blob.encoder import encode, decode
    >>> blob = encode(b"hello", width=16)
    >>> decode(blob, 5)  # b"hello"
"""

from zkp.blob.config import (
    FIELD_ELEMENTS_PER_BLOB,
    BYTES_PER_FIELD_ELEMENT,
    USABLE_BYTES_PER_FIELD_ELEMENT,
    MAX_BLOBS_PER_BATCH,
)
from zkp.blob.errors import DataTooLarge, SerializationError
from zkp.blob.field import FR, fr_from_bytes, fr_to_bytes


class Blob:
    """블롭: width개의 FR 원소로 이루어진 불변 시퀀스.

    평가 형식 다항식 p(x)를 나타낸다: self[i] = p(ωᵢ) (비트 반전 도메인).

    속성:
        elements: FR 원소 튜플
    """

    def __init__(self, elements):
        self._elements = tuple(e if isinstance(e, FR) else FR(e) for e in elements)

    @property
    def elements(self):
        return self._elements

    @property
    def width(self):
        return len(self._elements)

    def __len__(self):
        return len(self._elements)

    def __iter__(self):
        return iter(self._elements)

    def __getitem__(self, index):
        return self._elements[index]

    def __eq__(self, other):
        if not isinstance(other, Blob):
            return False
        return self._elements == other._elements

    def __repr__(self):
        nonzero = sum(1 for e in self._elements if e != FR(0))
        return f"Blob(width={self.width}, nonzero={nonzero})"

    def to_bytes(self):
        """블롭 → width × 32바이트 (원소별 빅엔디안)."""
        return b"".join(fr_to_bytes(e) for e in self._elements)

    @classmethod
    def from_bytes(cls, data, width=FIELD_ELEMENTS_PER_BLOB, blob_index=None):
        """32바이트 청크 열을 검증하여 블롭으로 만든다.

        Raises:
            SerializationError: 길이가 width × 32가 아닐 때
            FieldOverflow: 어떤 청크든 값 ≥ r일 때 (원소 인덱스 포함)
        """
        expected = width * BYTES_PER_FIELD_ELEMENT
        if len(data) != expected:
            raise SerializationError(
                f"블롭은 {expected}바이트여야 합니다: {len(data)}",
                blob_index=blob_index,
            )
        elements = []
        for i in range(width):
            chunk = data[i * BYTES_PER_FIELD_ELEMENT:(i + 1) * BYTES_PER_FIELD_ELEMENT]
            elements.append(fr_from_bytes(chunk, element_index=i, blob_index=blob_index))
        return cls(elements)


def blob_capacity(width=FIELD_ELEMENTS_PER_BLOB):
    """블롭 하나에 담을 수 있는 pubdata 바이트 수."""
    return width * USABLE_BYTES_PER_FIELD_ELEMENT


def encode(raw, width=FIELD_ELEMENTS_PER_BLOB, blob_index=None):
    """pubdata 바이트열을 블롭으로 인코딩한다.

    Args:
        raw: pubdata 바이트열 (≤ width × 31)
        width: 블롭의 필드 원소 개수 (v1: 4096)
        blob_index: 오류 보고용 블롭 인덱스

    Returns:
        Blob

    Raises:
        DataTooLarge: raw가 블롭 용량을 초과할 때
        FieldOverflow: 청크 검증 실패 (이 인코딩에서는 발생하지 않아야 함)

    예시 (width=16):
        >>> blob = encode(bytes(range(1, 63)), width=16)
        >>> # 62바이트 → 원소 0, 1에 31바이트씩, 나머지 14개는 0
    """
    raw = bytes(raw)
    capacity = blob_capacity(width)
    if len(raw) > capacity:
        raise DataTooLarge(
            f"pubdata {len(raw)}바이트가 블롭 용량 {capacity}바이트를 초과합니다",
            blob_index=blob_index,
        )

    chunks = bytearray()
    for offset in range(0, len(raw), USABLE_BYTES_PER_FIELD_ELEMENT):
        piece = raw[offset:offset + USABLE_BYTES_PER_FIELD_ELEMENT]
        chunks.append(0)
        chunks.extend(piece.ljust(USABLE_BYTES_PER_FIELD_ELEMENT, b"\x00"))

    # 데이터 이후의 원소는 모두 0
    chunks.extend(b"\x00" * (width * BYTES_PER_FIELD_ELEMENT - len(chunks)))

    return Blob.from_bytes(bytes(chunks), width=width, blob_index=blob_index)


def decode(blob, length):
    """encode의 역변환: 블롭에서 원래 pubdata의 앞 length바이트를 복원한다.

    Args:
        blob: encode로 만든 Blob
        length: 원래 pubdata 길이

    Returns:
        bytes

    Raises:
        DataTooLarge: length가 블롭 용량을 초과할 때
        SerializationError: 원소의 예약 바이트(최상위 바이트)가 0이 아닐 때
    """
    capacity = blob_capacity(blob.width)
    if length > capacity:
        raise DataTooLarge(
            f"요청한 길이 {length}가 블롭 용량 {capacity}를 초과합니다"
        )
    out = bytearray()
    for i, element in enumerate(blob):
        chunk = fr_to_bytes(element)
        if chunk[0] != 0:
            raise SerializationError(
                "예약 바이트가 0이 아닌 원소는 pubdata로 디코딩할 수 없습니다",
                element_index=i,
            )
        out.extend(chunk[1:])
        if len(out) >= length:
            break
    return bytes(out[:length])


def split_pubdata(raw, width=FIELD_ELEMENTS_PER_BLOB, max_blobs=MAX_BLOBS_PER_BATCH):
    """배치 pubdata를 블롭 단위 조각으로 나눈다 (첨부 순서 유지).

    빈 pubdata도 블롭 하나(빈 조각)로 게시한다.

    Args:
        raw: 배치 전체 pubdata
        width: 블롭당 필드 원소 개수
        max_blobs: 배치당 최대 블롭 수

    Returns:
        list[bytes]: 블롭별 pubdata 조각

    Raises:
        DataTooLarge: raw가 max_blobs × 블롭 용량을 초과할 때
    """
    raw = bytes(raw)
    capacity = blob_capacity(width)
    limit = capacity * max_blobs
    if len(raw) > limit:
        raise DataTooLarge(
            f"배치 pubdata {len(raw)}바이트가 {max_blobs}개 블롭 용량 {limit}바이트를 초과합니다"
        )
    if not raw:
        return [b""]
    return [raw[offset:offset + capacity] for offset in range(0, len(raw), capacity)]
