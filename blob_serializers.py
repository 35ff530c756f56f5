"""
블롭 데이터 직렬화/역직렬화 헬퍼
==================================

TinyDB와 JSON 응답에 넣을 수 있는 형태로 블롭 파이프라인 객체를 변환한다.
FR, 바이트열(커밋먼트/해시/증명), Blob, BlobArtifacts, BatchAuxiliaryOutput.

모든 값은 0x 접두사 hex 문자열이다. FR은 항상 32바이트 빅엔디안이며,
역직렬화할 때 위수 이상의 값은 FieldOverflow로 거부한다.
"""

from zkp.blob.errors import SerializationError
from zkp.blob.field import fr_to_bytes, fr_from_bytes
from zkp.blob.encoder import Blob
from zkp.blob.assembler import BlobArtifacts, BatchAuxiliaryOutput


# ─── bytes ───

def serialize_bytes(data):
    """bytes → "0x…" """
    return "0x" + bytes(data).hex()


def deserialize_bytes(s, length=None):
    """"0x…" → bytes (length가 주어지면 길이 검사)"""
    if not isinstance(s, str):
        raise SerializationError(f"hex 문자열이 아닙니다: {s!r}")
    body = s[2:] if s.startswith("0x") else s
    try:
        data = bytes.fromhex(body)
    except ValueError as exc:
        raise SerializationError(f"잘못된 hex 문자열입니다: {exc}") from exc
    if length is not None and len(data) != length:
        raise SerializationError(f"{length}바이트가 필요합니다: {len(data)}")
    return data


# ─── FR ───

def serialize_fr(val):
    """FR → "0x" + 32바이트 hex"""
    return serialize_bytes(fr_to_bytes(val))


def deserialize_fr(s):
    """"0x" + 32바이트 hex → FR (위수 이상이면 FieldOverflow)"""
    return fr_from_bytes(deserialize_bytes(s, 32))


# ─── Blob ───

def serialize_blob(blob):
    """Blob → "0x" + width × 32바이트 hex"""
    return serialize_bytes(blob.to_bytes())


def deserialize_blob(s, width):
    """hex → Blob (원소별 필드 검증)"""
    return Blob.from_bytes(deserialize_bytes(s), width=width)


def _deserialize_int(value, name):
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise SerializationError(f"{name}는 정수여야 합니다: {value!r}")
    try:
        return int(value)
    except ValueError as exc:
        raise SerializationError(f"{name}는 정수여야 합니다: {value!r}") from exc


# ─── BlobArtifacts ───

def serialize_artifacts(artifacts):
    """BlobArtifacts → dict"""
    return {
        "blob_index": artifacts.blob_index,
        "linear_hash": serialize_bytes(artifacts.linear_hash),
        "commitment": serialize_bytes(artifacts.commitment),
        "versioned_hash": serialize_bytes(artifacts.versioned_hash),
        "x": serialize_fr(artifacts.x),
        "y": serialize_fr(artifacts.y),
        "proof": serialize_bytes(artifacts.proof),
        "public_input_digest": serialize_bytes(artifacts.public_input_digest),
    }


def deserialize_artifacts(data):
    """dict → BlobArtifacts"""
    if not isinstance(data, dict):
        raise SerializationError(f"산출물은 객체여야 합니다: {data!r}")
    try:
        return BlobArtifacts(
            blob_index=_deserialize_int(data["blob_index"], "blob_index"),
            linear_hash=deserialize_bytes(data["linear_hash"], 32),
            commitment=deserialize_bytes(data["commitment"], 48),
            versioned_hash=deserialize_bytes(data["versioned_hash"], 32),
            x=deserialize_fr(data["x"]),
            y=deserialize_fr(data["y"]),
            proof=deserialize_bytes(data["proof"], 48),
            public_input_digest=deserialize_bytes(data["public_input_digest"], 32),
        )
    except KeyError as exc:
        raise SerializationError(f"산출물에 {exc.args[0]} 필드가 없습니다") from exc


# ─── BatchAuxiliaryOutput ───

def serialize_aux_output(aux):
    """BatchAuxiliaryOutput → dict"""
    return {
        "blob_count": aux.blob_count,
        "linear_hashes": [serialize_bytes(h) for h in aux.linear_hashes],
        "public_input_digests": [serialize_bytes(h) for h in aux.public_input_digests],
        "hash": serialize_bytes(aux.hash()),
    }


def deserialize_aux_output(data):
    """dict → BatchAuxiliaryOutput ("hash"는 파생값이므로 무시)"""
    if not isinstance(data, dict):
        raise SerializationError(f"보조 출력은 객체여야 합니다: {data!r}")
    try:
        return BatchAuxiliaryOutput(
            [deserialize_bytes(h, 32) for h in data["linear_hashes"]],
            [deserialize_bytes(h, 32) for h in data["public_input_digests"]],
            _deserialize_int(data["blob_count"], "blob_count"),
        )
    except KeyError as exc:
        raise SerializationError(f"보조 출력에 {exc.args[0]} 필드가 없습니다") from exc


# ─── 표시 헬퍼 ───

def hex_short(data, keep=6):
    """긴 hex 값 → 축약 문자열 (응답 요약용)"""
    h = bytes(data).hex()
    if len(h) <= 2 * keep:
        return "0x" + h
    return f"0x{h[:keep]}…{h[-keep:]}"


def fr_short(val):
    """FR → 축약 문자열"""
    s = str(int(val))
    if len(s) > 20:
        return s[:8] + "..." + s[-8:]
    return s
