"""
블롭 파이프라인 Flask Blueprint
================================

단계별 학습용 엔드포인트와 일괄 엔드포인트를 JSON으로 제공한다.

단계별 흐름 (각 단계는 이전 단계가 DB에 남긴 상태를 사용):
  POST /blob/encode     pubdata → Blob
  POST /blob/commit     Blob → 커밋먼트, versioned hash
  POST /blob/challenge  raw, VH → x
  POST /blob/evaluate   Blob, x → y, 열기 증명
  POST /blob/assemble   VH, x, y → 공개 입력 digest

일괄/검증:
  POST /blob/prove-batch  배치 pubdata → 블롭별 산출물 + 보조 출력
  POST /blob/verify       산출물 + 실행 계층 VH → L1 검사 결과
  GET  /blob/state        저장된 단계 상태
  POST /blob/clear        단계 상태 삭제
  GET  /blob/setup        신뢰 설정 요약

DB는 단계 사이의 임시 상태(MemoryStorage)일 뿐, 블롭 이력을 보관하지 않는다.
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from tinydb import Query

from zkp.blob.errors import BlobPipelineError
from zkp.blob.srs import get_trusted_setup
from zkp.blob.encoder import encode
from zkp.blob.kzg import commit, versioned_hash
from zkp.blob.challenge import linear_hash, derive_challenge, evaluate
from zkp.blob.assembler import BlobArtifacts, assemble
from zkp.blob.pipeline import prove_batch
from zkp.blob.verifier import verify_blob, verify_batch
from zkp.blob.field import FR, compress_g2

from blob_serializers import (
    serialize_bytes, deserialize_bytes,
    serialize_fr, deserialize_fr,
    serialize_blob, deserialize_blob,
    serialize_artifacts, deserialize_artifacts,
    serialize_aux_output, deserialize_aux_output,
    hex_short, fr_short,
)

logger = logging.getLogger(__name__)

blob_bp = Blueprint('blob', __name__, url_prefix='/blob')

DATA = Query()

# DB는 app.py에서 주입
DB = None


class MissingStep(Exception):
    """이전 단계 결과가 DB에 없을 때."""

    def __init__(self, step):
        super().__init__(f"먼저 {step} 단계를 실행하세요")
        self.step = step


class BadRequest(Exception):
    """요청 본문이 올바르지 않을 때."""


def init_blob_bp(db):
    """app.py에서 DB를 주입받는다."""
    global DB
    DB = db


# ─── DB 헬퍼 ───

def db_get(key):
    """DB에서 키로 데이터를 조회한다."""
    result = DB.search(DATA.type == key)
    if not result:
        return None
    return result[0].get("data")


def db_require(key, step):
    data = db_get(key)
    if data is None:
        raise MissingStep(step)
    return data


def db_set(key, data):
    """DB에 키로 데이터를 저장한다."""
    DB.upsert({"type": key, "data": data}, DATA.type == key)


def db_remove_prefix(prefix):
    """prefix로 시작하는 모든 키를 삭제한다."""
    DB.remove(DATA.type.test(lambda t: t.startswith(prefix)))


def request_body():
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        raise BadRequest("요청 본문은 JSON 객체여야 합니다")
    return body


def request_pubdata():
    body = request_body()
    if "pubdata" not in body:
        raise BadRequest("pubdata 필드(0x hex)가 필요합니다")
    return deserialize_bytes(body["pubdata"]), body


def request_int(body, key):
    """본문의 선택적 정수 필드 (없으면 None)"""
    value = body.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise BadRequest(f"{key}는 정수여야 합니다: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise BadRequest(f"{key}는 정수여야 합니다: {value!r}") from exc


def request_list(body, key, item_type=None):
    """본문의 리스트 필드 (item_type이 주어지면 원소 타입 검사)"""
    value = body[key]
    if not isinstance(value, list):
        raise BadRequest(f"{key}는 리스트여야 합니다")
    if item_type is not None:
        for i, item in enumerate(value):
            if not isinstance(item, item_type):
                raise BadRequest(f"{key}[{i}]의 형식이 올바르지 않습니다: {item!r}")
    return value


# ─── 오류 처리 ───

@blob_bp.errorhandler(BlobPipelineError)
def handle_pipeline_error(exc):
    logger.info("pipeline error: %s", exc)
    return jsonify(exc.to_dict()), 400


@blob_bp.errorhandler(MissingStep)
def handle_missing_step(exc):
    return jsonify({"error": "MissingStep", "message": str(exc), "step": exc.step}), 409


@blob_bp.errorhandler(BadRequest)
def handle_bad_request(exc):
    return jsonify({"error": "BadRequest", "message": str(exc)}), 400


# ──────────────────────────────────────────────────────────────
# 단계별 엔드포인트
# ──────────────────────────────────────────────────────────────

@blob_bp.route("/encode", methods=["POST"])
def blob_encode():
    """pubdata를 블롭으로 인코딩한다. 이전 단계 상태는 모두 지운다."""
    raw, _ = request_pubdata()
    setup = get_trusted_setup()
    blob = encode(raw, width=setup.size)

    db_remove_prefix("blob.")
    db_set("blob.raw", serialize_bytes(raw))
    db_set("blob.data", serialize_blob(blob))

    nonzero = sum(1 for e in blob if e != FR(0))
    return jsonify({
        "width": blob.width,
        "pubdata_length": len(raw),
        "nonzero_elements": nonzero,
        "head": [fr_short(e) for e in blob.elements[:8]],
    })


@blob_bp.route("/commit", methods=["POST"])
def blob_commit():
    """블롭 커밋먼트와 versioned hash를 계산한다."""
    setup = get_trusted_setup()
    blob = deserialize_blob(db_require("blob.data", "encode"), setup.size)

    commitment = commit(blob, setup)
    vh = versioned_hash(commitment)

    db_set("blob.commitment", serialize_bytes(commitment))
    db_set("blob.versioned_hash", serialize_bytes(vh))
    return jsonify({
        "commitment": serialize_bytes(commitment),
        "versioned_hash": serialize_bytes(vh),
    })


@blob_bp.route("/challenge", methods=["POST"])
def blob_challenge():
    """Fiat-Shamir 평가 점 x를 도출한다."""
    raw = deserialize_bytes(db_require("blob.raw", "encode"))
    vh = deserialize_bytes(db_require("blob.versioned_hash", "commit"), 32)

    x = derive_challenge(raw, vh)

    db_set("blob.linear_hash", serialize_bytes(linear_hash(raw)))
    db_set("blob.x", serialize_fr(x))
    return jsonify({
        "linear_hash": serialize_bytes(linear_hash(raw)),
        "x": serialize_fr(x),
    })


@blob_bp.route("/evaluate", methods=["POST"])
def blob_evaluate():
    """y = p(x)와 열기 증명을 계산한다."""
    setup = get_trusted_setup()
    blob = deserialize_blob(db_require("blob.data", "encode"), setup.size)
    x = deserialize_fr(db_require("blob.x", "challenge"))

    y, proof = evaluate(blob, x, setup)

    db_set("blob.y", serialize_fr(y))
    db_set("blob.proof", serialize_bytes(proof))
    return jsonify({
        "y": serialize_fr(y),
        "proof": serialize_bytes(proof),
    })


@blob_bp.route("/assemble", methods=["POST"])
def blob_assemble():
    """공개 입력 digest를 계산하고 블롭 산출물 전체를 반환한다."""
    vh = deserialize_bytes(db_require("blob.versioned_hash", "commit"), 32)
    x = deserialize_fr(db_require("blob.x", "challenge"))
    y = deserialize_fr(db_require("blob.y", "evaluate"))

    digest = assemble(vh, x, y)
    db_set("blob.public_input_digest", serialize_bytes(digest))

    artifacts = BlobArtifacts(
        blob_index=0,
        linear_hash=deserialize_bytes(db_get("blob.linear_hash"), 32),
        commitment=deserialize_bytes(db_get("blob.commitment"), 48),
        versioned_hash=vh,
        x=x,
        y=y,
        proof=deserialize_bytes(db_get("blob.proof"), 48),
        public_input_digest=digest,
    )
    return jsonify({
        "public_input_digest": serialize_bytes(digest),
        "artifacts": serialize_artifacts(artifacts),
    })


@blob_bp.route("/state", methods=["GET"])
def blob_state():
    """저장된 단계 상태를 반환한다 (블롭 본문은 축약)."""
    state = {}
    for row in DB.search(DATA.type.test(lambda t: t.startswith("blob."))):
        key = row["type"][len("blob."):]
        value = row["data"]
        if key == "data":
            value = hex_short(deserialize_bytes(value))
        state[key] = value
    return jsonify(state)


@blob_bp.route("/clear", methods=["POST"])
def blob_clear():
    """모든 단계 상태를 삭제한다."""
    db_remove_prefix("blob.")
    return jsonify({"cleared": True})


# ──────────────────────────────────────────────────────────────
# 일괄 / 검증 엔드포인트
# ──────────────────────────────────────────────────────────────

@blob_bp.route("/prove-batch", methods=["POST"])
def blob_prove_batch():
    """배치 pubdata 전체에 대해 파이프라인을 실행한다."""
    raw, body = request_pubdata()
    setup = get_trusted_setup()
    config = current_app.config.get("BLOB_PIPELINE")

    batch = prove_batch(
        raw,
        setup,
        attached_blob_count=request_int(body, "attached_blob_count"),
        max_workers=config.max_workers if config is not None else None,
    )
    return jsonify({
        "artifacts": [serialize_artifacts(a) for a in batch.artifacts],
        "aux_output": serialize_aux_output(batch.aux_output),
        "commitments": [serialize_bytes(c) for c in batch.commitments()],
        "proofs": [serialize_bytes(p) for p in batch.proofs()],
    })


@blob_bp.route("/verify", methods=["POST"])
def blob_verify():
    """L1 검사를 재현한다.

    요청 본문:
        artifacts: 직렬화된 BlobArtifacts 리스트
        versioned_hashes: 실행 계층에서 얻은 VH 리스트 (산출물과 같은 순서)
        aux_output: (선택) 직렬화된 BatchAuxiliaryOutput
    """
    body = request_body()
    if "artifacts" not in body or "versioned_hashes" not in body:
        raise BadRequest("artifacts와 versioned_hashes 필드가 필요합니다")

    setup = get_trusted_setup()
    artifacts_list = [deserialize_artifacts(a) for a in request_list(body, "artifacts", dict)]
    vhs = [deserialize_bytes(v, 32) for v in request_list(body, "versioned_hashes")]

    if body.get("aux_output") is not None:
        if not isinstance(body["aux_output"], dict):
            raise BadRequest("aux_output은 객체여야 합니다")
        aux = deserialize_aux_output(body["aux_output"])
        result = verify_batch(artifacts_list, vhs, aux, setup)
    else:
        if len(artifacts_list) != len(vhs):
            raise BadRequest("artifacts와 versioned_hashes의 개수가 다릅니다")
        result = all(verify_blob(a, v, setup) for a, v in zip(artifacts_list, vhs))

    return jsonify({"result": result})


@blob_bp.route("/setup", methods=["GET"])
def blob_setup():
    """현재 프로세스 신뢰 설정 요약."""
    setup = get_trusted_setup()
    return jsonify({
        "size": setup.size,
        "fingerprint": setup.fingerprint,
        "g2_tau": serialize_bytes(compress_g2(setup.g2_monomial[1])),
    })
