import logging

from flask import Flask, jsonify
from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from zkp.blob.config import PipelineConfig, FIELD_ELEMENTS_PER_BLOB, MAX_BLOBS_PER_BLOCK
from zkp.blob.srs import init_trusted_setup

from blob_routes import blob_bp, init_blob_bp

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def configure_logging(level="INFO"):
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO),
                        format=LOG_FORMAT)


def create_app(config=None, setup=None):
    """Flask 앱을 만든다.

    신뢰 설정을 먼저 초기화한다. 실패하면 InvalidSetup이 전파되어
    앱이 시작되지 않는다.

    Args:
        config: PipelineConfig (None이면 환경 변수에서 읽음)
        setup: 이미 만들어진 TrustedSetup (테스트용 주입)
    """
    if config is None:
        config = PipelineConfig.from_env()
    configure_logging(config.log_level)

    trusted_setup = init_trusted_setup(config, setup=setup)

    # 단계별 흐름의 임시 상태 (프로세스 메모리에만 존재)
    db = TinyDB(storage=MemoryStorage)

    app = Flask(__name__)
    app.config["BLOB_PIPELINE"] = config

    init_blob_bp(db.table("blob"))
    app.register_blueprint(blob_bp)

    @app.route("/")
    def index():
        return jsonify({
            "service": "blob-kzg-pipeline",
            "field_elements_per_blob": FIELD_ELEMENTS_PER_BLOB,
            "max_blobs_per_block": MAX_BLOBS_PER_BLOCK,
            "setup_size": trusted_setup.size,
        })

    return app


if __name__ == "__main__":
    create_app().run()
